"""
loader.py: read an uploaded template from disk.

Supports: .csv .txt (decoded text) and .xlsx .xlsm (sheet rows)

Public API:
    upload = load_upload("path/to/file.csv")
    parsed = RecordParser().parse_rows(upload["rows"], "devices")

Result dict keys:
    rows              list of string rows, header block included
    raw_text          decoded text for text files; None for workbooks
    detected_format   "csv", "xlsx", ...
    detected_encoding encoding name for text files; None for workbooks
    encoding_info     detected, confidence, is_utf8, suspicious_chars
    sheet_name        sheet that was read for workbooks; None otherwise
    warnings          list of warning strings
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path

import chardet

from bulk_import.csv_text import iter_rows
from bulk_import.errors import MalformedDocument, UnsupportedUploadFormat
from bulk_import.generator import SHEET_TITLE

logger = logging.getLogger(__name__)

TEXT_FORMATS = {".csv", ".txt"}
EXCEL_FORMATS = {".xlsx", ".xlsm"}
ALL_FORMATS = TEXT_FORMATS | EXCEL_FORMATS

# Dates typed into a workbook come back from pandas with a midnight time part.
_MIDNIGHT_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})[ T]00:00:00$", re.ASCII)


def _detect_encoding_info(raw: bytes) -> dict:
    result = chardet.detect(raw)
    detected = result.get("encoding") or "unknown"
    confidence = round(result.get("confidence") or 0.0, 2)
    is_utf8 = detected.upper().replace("-", "") in ("UTF8", "ASCII", "UTF8SIG")

    suspicious: list[str] = []
    if not is_utf8:
        for row_idx, line in enumerate(raw.split(b"\n")[:100], start=1):
            try:
                line.decode("utf-8")
            except UnicodeDecodeError as e:
                bad_byte = line[e.start : e.end]
                suspicious.append(f"row {row_idx}: byte {bad_byte!r} at position {e.start}")

    return {
        "detected": detected,
        "confidence": confidence,
        "is_utf8": is_utf8,
        "suspicious_chars": suspicious[:10],
    }


def _read_text_safely(raw: bytes, preferred_encoding: str) -> str:
    """
    Decode raw bytes line by line.

    Each line tries UTF-8, then the detected encoding, then latin-1, and
    finally CP1252 with replacement so one bad line never aborts the upload.
    """
    decoded_lines: list[str] = []
    for raw_line in raw.split(b"\n"):
        decoded: str | None = None
        for enc in ("utf-8", preferred_encoding, "latin-1"):
            if not enc or enc == "unknown":
                continue
            try:
                decoded = raw_line.decode(enc)
                break
            except (LookupError, UnicodeDecodeError):
                continue
        if decoded is None:
            decoded = raw_line.decode("cp1252", errors="replace")
        decoded_lines.append(decoded.replace("\x00", ""))
    text = "\n".join(decoded_lines)
    return text[1:] if text.startswith("\ufeff") else text


def _cell_text(value: object) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    text = str(value)
    match = _MIDNIGHT_RE.match(text.strip())
    return match.group(1) if match else text


def _load_text(path: Path, suffix: str) -> dict:
    raw = path.read_bytes()
    enc_info = _detect_encoding_info(raw)
    enc = enc_info["detected"] if enc_info["detected"] != "unknown" else "utf-8"
    text = _read_text_safely(raw, enc)
    warnings: list[str] = []
    if not enc_info["is_utf8"]:
        warnings.append(f"Upload decoded as {enc} (confidence {enc_info['confidence']}), not UTF-8")
    return {
        "rows": list(iter_rows(text)),
        "raw_text": text,
        "detected_format": suffix.lstrip("."),
        "detected_encoding": enc,
        "encoding_info": enc_info,
        "sheet_name": None,
        "warnings": warnings,
    }


def _load_excel(path: Path, suffix: str, sheet_name: str | None = None) -> dict:
    import pandas as pd

    warnings: list[str] = []
    try:
        with pd.ExcelFile(path) as xf:
            all_sheets = list(xf.sheet_names)
    except Exception as exc:
        raise MalformedDocument(f"Could not open workbook: {exc}") from exc

    if sheet_name is not None:
        if sheet_name not in all_sheets:
            raise MalformedDocument(f"Sheet '{sheet_name}' not found. Available: {all_sheets}")
        chosen = sheet_name
    elif SHEET_TITLE in all_sheets:
        chosen = SHEET_TITLE
    else:
        chosen = all_sheets[0]
        if len(all_sheets) > 1:
            warnings.append(f"No '{SHEET_TITLE}' sheet found; read '{chosen}'. Ignored: {all_sheets[1:]}")

    try:
        df = pd.read_excel(path, sheet_name=chosen, header=None, dtype=str)
    except Exception as exc:
        raise MalformedDocument(f"Could not load sheet '{chosen}': {exc}") from exc

    rows = [[_cell_text(value) for value in row] for row in df.itertuples(index=False, name=None)]
    return {
        "rows": rows,
        "raw_text": None,
        "detected_format": suffix.lstrip("."),
        "detected_encoding": None,
        "encoding_info": None,
        "sheet_name": chosen,
        "warnings": warnings,
    }


def load_upload(path: str | Path, sheet_name: str | None = None) -> dict:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in ALL_FORMATS:
        raise UnsupportedUploadFormat(
            f"Unsupported upload type '{suffix or '[missing extension]'}'. "
            f"Supported: {', '.join(sorted(ALL_FORMATS))}"
        )
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if suffix in TEXT_FORMATS:
        result = _load_text(path, suffix)
    else:
        result = _load_excel(path, suffix, sheet_name=sheet_name)

    logger.debug("Loaded %s with %d raw row(s)", path, len(result["rows"]))
    for warning in result["warnings"]:
        logger.warning("%s: %s", path.name, warning)
    return result
