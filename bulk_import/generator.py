"""
Template document generator.

Every template starts with the same five-row header block:

    1. metadata (one cell: type, version, category, timestamp, instructions)
    2. section names, each over the first column of its field span
    3. field display names (the authoritative column mapping for uploads)
    4. type/constraint rules per field
    5. example values

followed by blank rows for data entry. CSV and spreadsheet output share the
same logical rows; the spreadsheet adds fixed column widths and freezes the
header block.
"""

from __future__ import annotations

import io
import logging
import os
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable

import openpyxl
from openpyxl.utils import get_column_letter

from bulk_import.catalog import default_registry
from bulk_import.csv_text import encode_rows
from bulk_import.schema import SchemaRegistry, TemplateType

logger = logging.getLogger(__name__)

TEMPLATE_VERSION = "2025.1"
TEMPLATE_CATEGORY = "bulk_upload"
HEADER_ROWS = 5
CSV_BLANK_ROWS = 3
XLSX_BLANK_ROWS = 50
XLSX_COLUMN_WIDTH = 20
SHEET_TITLE = "Upload Template"
DEFAULT_PRODUCT_PREFIX = "stolen"
INSTRUCTIONS = (
    "Instructions: Use ENGLISH to fill this template. The top 5 rows are for system use only. "
    "Do not modify or delete header rows."
)
FORMATS = ("csv", "xlsx")


def template_filename(
    template_type: TemplateType | str,
    fmt: str,
    *,
    prefix: str | None = None,
    stamp: str | None = None,
) -> str:
    """<prefix>_<templateType>_template_<YYYY-MM-DD>.<csv|xlsx>"""
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported template format '{fmt}'. Supported: {', '.join(FORMATS)}")
    resolved = TemplateType.parse(template_type)
    prefix = prefix or os.environ.get("BULK_IMPORT_PRODUCT_PREFIX") or DEFAULT_PRODUCT_PREFIX
    stamp = stamp or os.environ.get("BULK_IMPORT_OUTPUT_STAMP") or date.today().isoformat()
    return f"{prefix}_{resolved.value}_template_{stamp}.{fmt}"


class TemplateGenerator:
    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        *,
        version: str = TEMPLATE_VERSION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.version = version
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def metadata_row(self, template_type: TemplateType | str) -> list[str]:
        resolved = TemplateType.parse(template_type)
        generated = self._clock().replace(microsecond=0).isoformat().replace("+00:00", "Z")
        parts = [
            f"TemplateType={resolved.value.upper()}",
            f"Version={self.version}",
            f"Category={TEMPLATE_CATEGORY}",
            f"Generated={generated}",
            INSTRUCTIONS,
        ]
        return [", ".join(parts)]

    def section_row(self, template_type: TemplateType | str) -> list[str]:
        row: list[str] = []
        for section in self.registry.sections_for(template_type):
            if not section.fields:
                continue
            row.append(section.name)
            row.extend([""] * (len(section.fields) - 1))
        return row

    def field_name_row(self, template_type: TemplateType | str) -> list[str]:
        return [f.display_name for f in self.registry.fields_for(template_type)]

    def rule_row(self, template_type: TemplateType | str) -> list[str]:
        return [",".join(f.rule_tokens()) for f in self.registry.fields_for(template_type)]

    def example_row(self, template_type: TemplateType | str) -> list[str]:
        return [f.example for f in self.registry.fields_for(template_type)]

    def header_rows(self, template_type: TemplateType | str) -> list[list[str]]:
        return [
            self.metadata_row(template_type),
            self.section_row(template_type),
            self.field_name_row(template_type),
            self.rule_row(template_type),
            self.example_row(template_type),
        ]

    def build_rows(self, template_type: TemplateType | str, blank_rows: int) -> list[list[str]]:
        width = len(self.registry.fields_for(template_type))
        rows = self.header_rows(template_type)
        rows.extend([""] * width for _ in range(blank_rows))
        return rows

    def to_csv(self, template_type: TemplateType | str) -> str:
        return encode_rows(self.build_rows(template_type, CSV_BLANK_ROWS))

    def to_workbook(self, template_type: TemplateType | str) -> openpyxl.Workbook:
        rows = self.build_rows(template_type, XLSX_BLANK_ROWS)
        width = len(self.registry.fields_for(template_type))

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE
        for row in rows:
            ws.append(row)
        for i in range(1, width + 1):
            ws.column_dimensions[get_column_letter(i)].width = XLSX_COLUMN_WIDTH
        ws.freeze_panes = f"A{HEADER_ROWS + 1}"
        return wb

    def to_xlsx_bytes(self, template_type: TemplateType | str) -> bytes:
        buffer = io.BytesIO()
        self.to_workbook(template_type).save(buffer)
        return buffer.getvalue()

    def write(self, template_type: TemplateType | str, output_path: Path, fmt: str | None = None) -> Path:
        output_path = Path(output_path)
        fmt = fmt or output_path.suffix.lower().lstrip(".")
        if fmt not in FORMATS:
            raise ValueError(f"Unsupported template format '{fmt}'. Supported: {', '.join(FORMATS)}")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "csv":
            output_path.write_text(self.to_csv(template_type), encoding="utf-8")
        else:
            self.to_workbook(template_type).save(output_path)
        logger.info("Wrote %s template for %s to %s", fmt, TemplateType.parse(template_type).value, output_path)
        return output_path


def generate_csv_template(template_type: TemplateType | str) -> str:
    return TemplateGenerator().to_csv(template_type)


def generate_excel_template(template_type: TemplateType | str) -> bytes:
    return TemplateGenerator().to_xlsx_bytes(template_type)
