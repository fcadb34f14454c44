"""
Exceptions and the shared issue taxonomy.

Exceptions are reserved for problems that stop a whole generate/validate call.
Everything a single row can get wrong is reported as an issue code instead,
and this table keeps severity and wording in one place so the validator,
report writer and CLI do not drift.
"""

from __future__ import annotations

from typing import Any


class BulkImportError(Exception):
    """Base exception for template and upload processing."""


class UnknownTemplateType(BulkImportError, ValueError):
    def __init__(self, template_type: Any, known: list[str] | None = None) -> None:
        self.template_type = template_type
        self.known = list(known or [])
        message = f"Unknown template type: {template_type!r}"
        if self.known:
            message += f". Supported: {', '.join(self.known)}"
        super().__init__(message)


class MalformedDocument(BulkImportError, ValueError):
    """The upload has no header block that can be parsed at all."""


class UnsupportedUploadFormat(BulkImportError, ValueError):
    """The upload file type cannot be read."""


ISSUE_DEFINITIONS: dict[str, dict[str, str]] = {
    "missing_required_field": {
        "severity": "error",
        "description": "A required column is blank or absent for this row.",
    },
    "type_mismatch": {
        "severity": "error",
        "description": "The value is not a valid number, date, email, phone number or URL.",
    },
    "length_exceeded": {
        "severity": "error",
        "description": "The text is longer than the column allows.",
    },
    "pattern_mismatch": {
        "severity": "error",
        "description": "The value does not match the pattern declared for the column.",
    },
    "enum_violation": {
        "severity": "error",
        "description": "The value is not one of the allowed dropdown options.",
    },
    "special_format_violation": {
        "severity": "error",
        "description": "The value breaks a column-specific format rule (IMEI must be 15 characters).",
    },
    "date_ordering_violation": {
        "severity": "error",
        "description": "An end date (warranty or policy expiry) falls before its start date.",
    },
    "stale_date": {
        "severity": "warning",
        "description": "The incident happened more than two years ago; recovery is less likely.",
    },
    "price_outlier": {
        "severity": "warning",
        "description": "The price is unusually high or low and should be double-checked.",
    },
    "duplicate_value": {
        "severity": "error",
        "description": "A value that must be unique within the upload appears in more than one row.",
    },
}


def severity_for(code: str) -> str:
    return ISSUE_DEFINITIONS[code]["severity"]
