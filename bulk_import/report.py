"""Validation report rendering: CSV artifact, grouped text and JSON payload."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from bulk_import.contracts import build_run_summary, wrap_payload
from bulk_import.csv_text import encode_rows
from bulk_import.models import ValidationIssue, ValidationResult

REPORT_COLUMNS = ["Row", "Column", "Field", "Value", "Error", "Severity"]


def report_rows(result: ValidationResult) -> list[list[str]]:
    rows: list[list[str]] = [
        ["Validation Report"],
        ["Total Rows", str(result.total_rows)],
        ["Valid Rows", str(result.valid_rows)],
        ["Invalid Rows", str(result.invalid_rows)],
        ["Errors", str(len(result.errors))],
        ["Warnings", str(len(result.warnings))],
        [],
        list(REPORT_COLUMNS),
    ]
    for issue in [*result.errors, *result.warnings]:
        rows.append([
            str(issue.row),
            issue.column,
            issue.field,
            "" if issue.value is None else str(issue.value),
            issue.error,
            issue.severity,
        ])
    return rows


def export_validation_report(result: ValidationResult) -> str:
    return encode_rows(report_rows(result))


def write_validation_report(result: ValidationResult, output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(export_validation_report(result) + "\n", encoding="utf-8")
    return output_path


def format_validation_errors(issues: Iterable[ValidationIssue]) -> str:
    grouped: dict[int, list[ValidationIssue]] = {}
    for issue in issues:
        grouped.setdefault(issue.row, []).append(issue)
    if not grouped:
        return ""
    lines: list[str] = []
    for row, row_issues in grouped.items():
        lines.append(f"Row {row}:")
        lines.extend(f"  - {issue.field}: {issue.error}" for issue in row_issues)
    return "\n".join(lines) + "\n"


def build_validation_payload(
    result: ValidationResult,
    *,
    template_type: str,
    input_path: Path | None = None,
    report_path: Path | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    body = {"template_type": template_type, **result.to_dict()}
    run_summary = build_run_summary(
        command="validate",
        input_path=input_path,
        status="ok" if result.is_valid else "invalid",
        output_path=report_path,
        warnings=warnings,
        metrics={
            "total_rows": result.total_rows,
            "valid_rows": result.valid_rows,
            "invalid_rows": result.invalid_rows,
            "errors": len(result.errors),
            "warnings": len(result.warnings),
        },
    )
    return wrap_payload("bulk_import.validation", body, run_summary)
