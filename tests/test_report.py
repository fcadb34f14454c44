from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from bulk_import.csv_text import iter_rows
from bulk_import.models import ValidationIssue, ValidationResult
from bulk_import.report import (
    REPORT_COLUMNS,
    build_validation_payload,
    export_validation_report,
    format_validation_errors,
    write_validation_report,
)


def sample_result() -> ValidationResult:
    errors = [
        ValidationIssue(6, "brand", "Brand", "", "Required field is empty", "missing_required_field"),
        ValidationIssue(6, "serial_number", "Serial Number", "a,b", "Value does not match required pattern", "pattern_mismatch"),
        ValidationIssue(8, "serial_number", "Serial Number", "ABC123", "Duplicate value found (also in row(s) 7)", "duplicate_value"),
    ]
    warnings = [
        ValidationIssue(7, "purchase_price", "Purchase Price", "250000", "Unusually high price. Please verify this is correct.", "price_outlier"),
    ]
    return ValidationResult(
        total_rows=3,
        valid_rows=1,
        invalid_rows=2,
        errors=errors,
        warnings=warnings,
        validated_data=[{"serial_number": "ABC123"}],
    )


class ReportCsvTests(unittest.TestCase):
    def test_summary_block_then_findings_table(self):
        rows = list(iter_rows(export_validation_report(sample_result())))
        self.assertEqual(rows[0], ["Validation Report"])
        self.assertEqual(rows[1:6], [
            ["Total Rows", "3"],
            ["Valid Rows", "1"],
            ["Invalid Rows", "2"],
            ["Errors", "3"],
            ["Warnings", "1"],
        ])
        self.assertEqual(rows[6], [""])
        self.assertEqual(rows[7], REPORT_COLUMNS)
        self.assertEqual([row[0] for row in rows[8:]], ["6", "6", "8", "7"])
        self.assertEqual(rows[9][3], "a,b")
        self.assertEqual(rows[-1][-1], "warning")

    def test_empty_result_has_header_only(self):
        rows = list(iter_rows(export_validation_report(ValidationResult(0, 0, 0))))
        self.assertEqual(rows[-1], REPORT_COLUMNS)

    def test_write_creates_parent_directories(self):
        with tempfile.TemporaryDirectory() as td:
            path = write_validation_report(sample_result(), Path(td) / "nested" / "report.csv")
            text = path.read_text(encoding="utf-8")
            self.assertTrue(text.startswith("Validation Report\n"))
            self.assertTrue(text.endswith("\n"))


class GroupedTextTests(unittest.TestCase):
    def test_findings_grouped_by_row(self):
        result = sample_result()
        text = format_validation_errors(result.errors)
        self.assertEqual(
            text,
            "Row 6:\n"
            "  - Brand: Required field is empty\n"
            "  - Serial Number: Value does not match required pattern\n"
            "Row 8:\n"
            "  - Serial Number: Duplicate value found (also in row(s) 7)\n",
        )

    def test_no_findings_is_empty_text(self):
        self.assertEqual(format_validation_errors([]), "")


class PayloadTests(unittest.TestCase):
    def test_validation_payload_contract(self):
        payload = build_validation_payload(
            sample_result(),
            template_type="devices",
            input_path=Path("upload.csv"),
            warnings=["Upload decoded as ISO-8859-1"],
        )
        self.assertEqual(payload["contract"], {"name": "bulk_import.validation", "version": "1.0.0"})
        self.assertEqual(payload["schema_version"], "1.0.0")
        self.assertEqual(payload["template_type"], "devices")
        self.assertFalse(payload["is_valid"])
        self.assertEqual(payload["issue_counts"]["duplicate_value"], 1)
        summary = payload["run_summary"]
        self.assertEqual(summary["tool"], "bulk-import")
        self.assertEqual(summary["command"], "validate")
        self.assertEqual(summary["status"], "invalid")
        self.assertEqual(summary["input_file"], "upload.csv")
        self.assertIsNone(summary["output_file"])
        self.assertEqual(summary["warnings_count"], 1)
        self.assertEqual(summary["metrics"]["errors"], 3)


if __name__ == "__main__":
    unittest.main()
