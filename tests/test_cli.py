from __future__ import annotations

import json
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

from bulk_import.csv_text import encode_rows, iter_rows

ROOT = Path(__file__).resolve().parents[1]
CLI = [sys.executable, "-m", "bulk_import.cli"]
FIXED_STAMP = "2026-03-01"


def run_cli(*args: str, env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    merged_env = dict(os.environ)
    merged_env["BULK_IMPORT_OUTPUT_STAMP"] = FIXED_STAMP
    merged_env.pop("BULK_IMPORT_PRODUCT_PREFIX", None)
    if env:
        merged_env.update(env)
    return subprocess.run(
        [*CLI, *args],
        cwd=ROOT,
        capture_output=True,
        text=True,
        env=merged_env,
    )


def write_upload(path: Path, template_csv: str, *data_rows: list[str]) -> Path:
    rows = list(iter_rows(template_csv))[:5]
    rows.extend(data_rows)
    path.write_text(encode_rows(rows), encoding="utf-8")
    return path


def device_row(serial: str, warranty: str = "") -> list[str]:
    # device_name, device_type, brand, model, serial_number, imei, mac_address,
    # purchase_date, purchase_price, purchase_location, receipt_url, color,
    # storage_capacity, ram, condition, warranty_status, warranty_expiry
    return ["", "phone", "Apple", "A2483", serial, "", "", "2024-06-01", "1299.99",
            "", "", "", "", "", "", "", warranty]


class BulkImportCliTests(unittest.TestCase):
    def template_csv(self, tmpdir: str, template_type: str = "devices") -> str:
        proc = run_cli("template", template_type, "--out", tmpdir)
        self.assertEqual(proc.returncode, 0, proc.stderr)
        path = Path(tmpdir) / f"stolen_{template_type}_template_{FIXED_STAMP}.csv"
        self.assertTrue(path.exists())
        return path.read_text(encoding="utf-8")

    def test_template_writes_stamped_csv(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            text = self.template_csv(tmpdir)
            self.assertTrue(text.startswith('"TemplateType=DEVICES, Version=2025.1'))
            self.assertEqual(len(list(iter_rows(text))), 8)

    def test_template_prefix_from_environment_and_xlsx(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            proc = run_cli("template", "repair_logs", "--format", "xlsx", "--out", tmpdir, "--json",
                           env={"BULK_IMPORT_PRODUCT_PREFIX": "acme"})
            self.assertEqual(proc.returncode, 0, proc.stderr)
            payload = json.loads(proc.stdout)
            self.assertEqual(payload["contract"]["name"], "bulk_import.template")
            self.assertEqual(payload["format"], "xlsx")
            expected = Path(tmpdir) / f"acme_repair_logs_template_{FIXED_STAMP}.xlsx"
            self.assertEqual(payload["run_summary"]["output_file"], str(expected))
            self.assertTrue(expected.exists())

    def test_template_refuses_to_overwrite(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            self.template_csv(tmpdir)
            proc = run_cli("template", "devices", "--out", tmpdir)
            self.assertEqual(proc.returncode, 1)
            self.assertIn("Refusing to overwrite", proc.stderr)

    def test_template_unsupported_output_suffix_exits_1(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "t.txt"
            proc = run_cli("template", "devices", "--output", str(output))
            self.assertEqual(proc.returncode, 1)
            self.assertIn("Unsupported template format 'txt'", proc.stderr)
            self.assertFalse(output.exists())

    def test_template_format_must_agree_with_output_suffix(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "x.csv"
            proc = run_cli("template", "devices", "--format", "xlsx", "--output", str(output))
            self.assertEqual(proc.returncode, 1)
            self.assertIn("conflicts with output suffix", proc.stderr)
            self.assertFalse(output.exists())

    def test_template_output_suffix_picks_format(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "devices.xlsx"
            proc = run_cli("template", "devices", "--output", str(output), "--json")
            self.assertEqual(proc.returncode, 0, proc.stderr)
            self.assertEqual(json.loads(proc.stdout)["format"], "xlsx")
            self.assertTrue(output.read_bytes().startswith(b"PK"))

    def test_unknown_template_type_exits_1(self):
        proc = run_cli("template", "stakeholders")
        self.assertEqual(proc.returncode, 1)
        self.assertIn("Unknown template type", proc.stderr)

    def test_validate_clean_upload_exits_0(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            upload = write_upload(Path(tmpdir) / "upload.csv", self.template_csv(tmpdir), device_row("ABC123"))
            proc = run_cli("validate", str(upload), "--type", "devices")
            self.assertEqual(proc.returncode, 0, proc.stderr)
            self.assertIn("Valid: True", proc.stderr)
            self.assertIn("Rows: 1 total, 1 valid, 0 invalid", proc.stderr)

    def test_validate_invalid_upload_exits_5_and_writes_report(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            upload = write_upload(
                Path(tmpdir) / "upload.csv",
                self.template_csv(tmpdir),
                device_row("ABC123", warranty="2024-01-01"),
                device_row("XYZ789"),
                device_row("XYZ789"),
            )
            report = Path(tmpdir) / "report.csv"
            proc = run_cli("validate", str(upload), "--type", "devices", "--report", str(report), "--verbose")
            self.assertEqual(proc.returncode, 5, proc.stderr)
            self.assertIn("Row 6:", proc.stderr)
            self.assertIn("Warranty expiry date cannot be before purchase date", proc.stderr)
            self.assertIn("Validation report:", proc.stderr)
            rows = list(iter_rows(report.read_text(encoding="utf-8")))
            self.assertEqual(rows[3], ["Invalid Rows", "2"])
            self.assertEqual([row[0] for row in rows[8:]], ["6", "8"])

    def test_validate_json_stdout_contains_only_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            upload = write_upload(Path(tmpdir) / "upload.csv", self.template_csv(tmpdir), device_row("ab"))
            proc = run_cli("validate", str(upload), "--type", "devices", "--json")
            self.assertEqual(proc.returncode, 5, proc.stderr)
            payload = json.loads(proc.stdout)
            self.assertEqual(payload["contract"]["name"], "bulk_import.validation")
            self.assertEqual(payload["errors"][0]["code"], "pattern_mismatch")
            self.assertEqual(payload["errors"][0]["row"], 6)
            self.assertEqual(payload["run_summary"]["status"], "invalid")

    def test_validate_missing_file_exits_1(self):
        proc = run_cli("validate", "does-not-exist.csv", "--type", "devices")
        self.assertEqual(proc.returncode, 1)
        self.assertIn("File not found", proc.stderr)

    def test_validate_blank_upload_exits_2(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            upload = Path(tmpdir) / "blank.csv"
            upload.write_text("\n\n", encoding="utf-8")
            proc = run_cli("validate", str(upload), "--type", "devices")
            self.assertEqual(proc.returncode, 2)
            self.assertIn("no header rows", proc.stderr)

    def test_validate_requires_type(self):
        proc = run_cli("validate", "upload.csv")
        self.assertEqual(proc.returncode, 1)
        self.assertIn("--type", proc.stderr)

    def test_types_json_lists_every_template(self):
        proc = run_cli("types", "--json")
        self.assertEqual(proc.returncode, 0, proc.stderr)
        payload = json.loads(proc.stdout)
        self.assertEqual(
            sorted(payload),
            ["devices", "found_reports", "insurance_policies", "lost_reports", "marketplace_listings", "repair_logs"],
        )
        self.assertEqual(payload["devices"]["unique"], ["serial_number", "imei"])

    def test_explain_known_and_unknown_codes(self):
        proc = run_cli("explain", "price_outlier")
        self.assertEqual(proc.returncode, 0, proc.stderr)
        self.assertIn("Severity: warning", proc.stdout)
        self.assertIn("Blocks the row: no", proc.stdout)
        proc = run_cli("explain", "not_a_code")
        self.assertEqual(proc.returncode, 1)

    def test_version(self):
        proc = run_cli("version")
        self.assertEqual(proc.returncode, 0, proc.stderr)
        self.assertEqual(proc.stdout.strip(), "0.3.0")


if __name__ == "__main__":
    unittest.main()
