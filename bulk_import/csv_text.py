"""
Delimited-text codec for template documents.

Encoding quotes a cell only when it contains a comma, a quote or a line
break, doubling any embedded quotes. Decoding is an explicit state machine
so the header contract does not depend on csv dialect sniffing.
"""

from __future__ import annotations

from typing import Iterable, Iterator

DELIMITER = ","
QUOTE = '"'
_NEEDS_QUOTING = (DELIMITER, QUOTE, "\n", "\r")


def encode_cell(value: object) -> str:
    text = "" if value is None else str(value)
    if any(token in text for token in _NEEDS_QUOTING):
        return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE
    return text


def encode_row(cells: Iterable[object]) -> str:
    return DELIMITER.join(encode_cell(cell) for cell in cells)


def encode_rows(rows: Iterable[Iterable[object]]) -> str:
    return "\n".join(encode_row(row) for row in rows)


def parse_line(line: str) -> list[str]:
    """Split one physical line into raw cells.

    A quote inside a quoted cell followed by another quote is a literal
    quote; any other quote toggles quoted mode. Cells are not trimmed.
    """
    cells: list[str] = []
    buffer: list[str] = []
    in_quotes = False
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == QUOTE:
            if in_quotes and index + 1 < length and line[index + 1] == QUOTE:
                buffer.append(QUOTE)
                index += 1
            else:
                in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            cells.append("".join(buffer))
            buffer = []
        else:
            buffer.append(char)
        index += 1
    cells.append("".join(buffer))
    return cells


def iter_rows(text: str) -> Iterator[list[str]]:
    """Yield logical rows from a whole document.

    Same rules as parse_line, but quoted mode survives line breaks so a
    quoted cell may span several physical lines. Outside quotes, LF and
    CRLF both end a row. A trailing line break does not produce an extra row.
    """
    cells: list[str] = []
    buffer: list[str] = []
    in_quotes = False
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == QUOTE:
            if in_quotes and index + 1 < length and text[index + 1] == QUOTE:
                buffer.append(QUOTE)
                index += 1
            else:
                in_quotes = not in_quotes
        elif in_quotes:
            buffer.append(char)
        elif char == DELIMITER:
            cells.append("".join(buffer))
            buffer = []
        elif char == "\r" and index + 1 < length and text[index + 1] == "\n":
            pass
        elif char == "\n":
            cells.append("".join(buffer))
            yield cells
            cells, buffer = [], []
        else:
            buffer.append(char)
        index += 1
    if buffer or cells or (length and text[-1] != "\n"):
        cells.append("".join(buffer))
        yield cells
