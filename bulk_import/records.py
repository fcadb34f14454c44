"""
Record parser for filled-in templates.

Rows 1-5 are the header block and never data. Row 3 maps columns to field
keys; every later row with at least one non-blank cell becomes a record
keyed by those field keys.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from bulk_import.catalog import default_registry
from bulk_import.csv_text import iter_rows
from bulk_import.errors import MalformedDocument
from bulk_import.generator import HEADER_ROWS
from bulk_import.schema import SchemaRegistry, TemplateType

logger = logging.getLogger(__name__)

FIELD_NAME_ROW = 3
DATA_START_ROW = HEADER_ROWS + 1

_WHITESPACE_RE = re.compile(r"\s+")


def field_key(header: str) -> str:
    return _WHITESPACE_RE.sub("_", (header or "").strip().lower())


def parse_metadata(cell: str) -> dict[str, str]:
    """Pull key=value pairs out of the row-1 metadata cell."""
    metadata: dict[str, str] = {}
    for part in (cell or "").split(","):
        key, sep, value = part.partition("=")
        if sep and key.strip() and " " not in key.strip():
            metadata[key.strip()] = value.strip()
    return metadata


@dataclass
class ParsedUpload:
    template_type: TemplateType
    headers: list[str]
    keys: list[str]
    records: list[dict[str, str]] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    blank_rows_dropped: int = 0


class RecordParser:
    def __init__(self, registry: SchemaRegistry | None = None) -> None:
        self.registry = registry or default_registry()

    def column_keys(self, template_type: TemplateType | str, headers: Sequence[str]) -> list[str]:
        lookup: dict[str, str] = {}
        for template_field in self.registry.fields_for(template_type):
            lookup[field_key(template_field.display_name)] = template_field.name
            lookup.setdefault(template_field.name, template_field.name)
        return [lookup.get(field_key(header), field_key(header)) for header in headers]

    def parse_document(self, text: str, template_type: TemplateType | str) -> ParsedUpload:
        if text.startswith("\ufeff"):
            text = text[1:]
        return self.parse_rows(iter_rows(text), template_type)

    def parse_rows(self, rows: Iterable[Sequence[object]], template_type: TemplateType | str) -> ParsedUpload:
        resolved = TemplateType.parse(template_type)
        self.registry.fields_for(resolved)  # unmapped types fail before any row is read

        materialised = [["" if cell is None else str(cell) for cell in row] for row in rows]
        if not any(cell.strip() for row in materialised for cell in row):
            raise MalformedDocument("Upload is empty: no header rows found")

        metadata = parse_metadata(materialised[0][0] if materialised[0] else "")
        warnings: list[str] = []
        declared = metadata.get("TemplateType", "").lower()
        if declared and declared != resolved.value:
            message = f"Template metadata says '{declared}' but the upload is validated as '{resolved.value}'"
            logger.warning(message)
            warnings.append(message)

        if len(materialised) < HEADER_ROWS:
            message = (
                f"Upload has only {len(materialised)} row(s); the {HEADER_ROWS}-row header block is incomplete, "
                "so no data rows were read"
            )
            logger.warning(message)
            warnings.append(message)
            headers = materialised[FIELD_NAME_ROW - 1] if len(materialised) >= FIELD_NAME_ROW else []
            return ParsedUpload(
                template_type=resolved,
                headers=[h.strip() for h in headers],
                keys=self.column_keys(resolved, headers),
                metadata=metadata,
                warnings=warnings,
            )

        headers = [h.strip() for h in materialised[FIELD_NAME_ROW - 1]]
        keys = self.column_keys(resolved, headers)
        parsed = ParsedUpload(
            template_type=resolved,
            headers=headers,
            keys=keys,
            metadata=metadata,
            warnings=warnings,
        )

        for offset, row in enumerate(materialised[HEADER_ROWS:]):
            values = [cell.strip() for cell in row]
            if not any(values):
                parsed.blank_rows_dropped += 1
                continue
            record: dict[str, str] = {}
            for index, key in enumerate(keys):
                if not key:
                    continue
                record[key] = values[index] if index < len(values) else ""
            parsed.records.append(record)
            parsed.row_numbers.append(DATA_START_ROW + offset)

        logger.debug(
            "Parsed %d record(s) for %s, dropped %d blank row(s)",
            len(parsed.records),
            resolved.value,
            parsed.blank_rows_dropped,
        )
        return parsed


def parse_csv(text: str, template_type: TemplateType | str) -> list[dict[str, str]]:
    return RecordParser().parse_document(text, template_type).records
