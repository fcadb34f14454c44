"""
Single-cell validation against one TemplateField.

Checks run in a fixed order and stop at the first failure, so each cell
yields at most one issue: empty/required, then the type check, then the
declared pattern, then column-specific format rules.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any
from urllib.parse import urlsplit

from bulk_import.models import ValidationIssue
from bulk_import.schema import FieldType, TemplateField

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$", re.ASCII)
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$", re.ASCII)
PHONE_STRIP_RE = re.compile(r"[\s\-()]")
URL_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")

IMEI_LENGTH = 15


def is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def parse_number(value: str) -> float | None:
    text = value.strip()
    if not NUMBER_RE.match(text):
        return None
    return float(text)


def parse_iso_date(value: str) -> date | None:
    text = value.strip()
    if not DATE_RE.match(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def is_absolute_url(value: str) -> bool:
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return False
    if not parts.scheme or not URL_SCHEME_RE.match(parts.scheme):
        return False
    if any(ch.isspace() for ch in value.strip()):
        return False
    return bool(parts.netloc or parts.path)


def is_past_only_date(template_field: TemplateField) -> bool:
    """Purchase/incident style dates may not lie in the future; expiry dates may."""
    return "date" in template_field.name and "expiry" not in template_field.name


class FieldValidator:
    def __init__(self, today: date | None = None) -> None:
        self.today = today

    def _today(self) -> date:
        return self.today or date.today()

    def validate(self, template_field: TemplateField, value: Any, row_number: int) -> ValidationIssue | None:
        def issue(message: str, code: str, shown: Any) -> ValidationIssue:
            return ValidationIssue(
                row=row_number,
                column=template_field.name,
                field=template_field.display_name,
                value=shown,
                error=message,
                code=code,
            )

        if is_blank(value):
            if template_field.required:
                return issue("Required field is empty", "missing_required_field", "" if value is None else value)
            return None

        text = str(value).strip()
        kind = template_field.type

        if kind is FieldType.TEXT:
            if template_field.max_length and len(text) > template_field.max_length:
                return issue(
                    f"Text exceeds maximum length of {template_field.max_length} characters",
                    "length_exceeded",
                    text,
                )

        elif kind is FieldType.NUMBER:
            number = parse_number(text)
            if number is None:
                return issue("Invalid number format", "type_mismatch", text)
            if number < 0:
                return issue("Number must not be negative", "type_mismatch", text)

        elif kind is FieldType.DATE:
            if not DATE_RE.match(text):
                return issue("Invalid date format. Use YYYY-MM-DD", "type_mismatch", text)
            parsed = parse_iso_date(text)
            if parsed is None:
                return issue("Invalid date", "type_mismatch", text)
            if is_past_only_date(template_field) and parsed > self._today():
                return issue("Date cannot be in the future", "type_mismatch", text)

        elif kind is FieldType.EMAIL:
            if not EMAIL_RE.match(text):
                return issue("Invalid email format", "type_mismatch", text)

        elif kind is FieldType.PHONE:
            if not PHONE_RE.match(PHONE_STRIP_RE.sub("", text)):
                return issue(
                    "Invalid phone number format. Use international format (e.g. +27821234567)",
                    "type_mismatch",
                    text,
                )

        elif kind is FieldType.URL:
            if not is_absolute_url(text):
                return issue("Invalid URL format", "type_mismatch", text)

        elif kind is FieldType.DROPDOWN:
            if text.lower() not in template_field.option_lookup:
                return issue(
                    "Invalid option. Must be one of: " + ", ".join(template_field.options),
                    "enum_violation",
                    text,
                )

        pattern = template_field.compiled_pattern
        if pattern is not None and not pattern.search(text):
            return issue("Value does not match required pattern", "pattern_mismatch", text)

        if template_field.name == "imei" and len(text) != IMEI_LENGTH:
            return issue(f"IMEI must be exactly {IMEI_LENGTH} digits", "special_format_violation", text)

        return None
