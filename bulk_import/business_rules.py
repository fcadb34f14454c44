"""Cross-field rules evaluated on one record after the per-cell checks."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from bulk_import.field_rules import is_blank, parse_iso_date, parse_number
from bulk_import.models import ValidationIssue

# (start column, end column, end column label, message)
DATE_ORDERING_RULES = (
    ("purchase_date", "warranty_expiry", "Warranty Expiry Date", "Warranty expiry date cannot be before purchase date"),
    ("start_date", "expiry_date", "Expiry Date", "Policy expiry date cannot be before start date"),
)

STALE_INCIDENT_YEARS = 2
HIGH_PURCHASE_PRICE = 100_000
LOW_LISTING_PRICE = 100


def years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def _number(record: Mapping[str, Any], key: str) -> float | None:
    value = record.get(key)
    if is_blank(value):
        return None
    return parse_number(str(value))


class BusinessRuleValidator:
    def __init__(self, today: date | None = None) -> None:
        self.today = today

    def validate(self, record: Mapping[str, Any], row_number: int) -> list[ValidationIssue]:
        today = self.today or date.today()
        issues: list[ValidationIssue] = []

        for start_key, end_key, end_label, message in DATE_ORDERING_RULES:
            if is_blank(record.get(start_key)) or is_blank(record.get(end_key)):
                continue
            start = parse_iso_date(str(record[start_key]))
            end = parse_iso_date(str(record[end_key]))
            if start is not None and end is not None and end < start:
                issues.append(ValidationIssue(
                    row=row_number,
                    column=end_key,
                    field=end_label,
                    value=record[end_key],
                    error=message,
                    code="date_ordering_violation",
                ))

        if not is_blank(record.get("incident_date")):
            incident = parse_iso_date(str(record["incident_date"]))
            if incident is not None and incident < years_before(today, STALE_INCIDENT_YEARS):
                issues.append(ValidationIssue(
                    row=row_number,
                    column="incident_date",
                    field="Incident Date",
                    value=record["incident_date"],
                    error=f"Incident date is more than {STALE_INCIDENT_YEARS} years old. This may affect recovery chances.",
                    code="stale_date",
                ))

        purchase_price = _number(record, "purchase_price")
        if purchase_price is not None and purchase_price > HIGH_PURCHASE_PRICE:
            issues.append(ValidationIssue(
                row=row_number,
                column="purchase_price",
                field="Purchase Price",
                value=record["purchase_price"],
                error="Unusually high price. Please verify this is correct.",
                code="price_outlier",
            ))

        price = _number(record, "price")
        if price is not None and 0 < price < LOW_LISTING_PRICE:
            issues.append(ValidationIssue(
                row=row_number,
                column="price",
                field="Price",
                value=record["price"],
                error="Unusually low price. Please verify this is correct.",
                code="price_outlier",
            ))

        return issues
