"""Uniqueness checks across every record of one upload."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from bulk_import.field_rules import is_blank
from bulk_import.models import ValidationIssue
from bulk_import.records import DATA_START_ROW


class DuplicateDetector:
    def detect(
        self,
        records: Sequence[Mapping[str, Any]],
        unique_fields: Sequence[str],
        row_numbers: Sequence[int] | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> list[ValidationIssue]:
        """
        Flag every repeat of a value in a unique column.

        Records are scanned in document order; the first occurrence is never
        flagged, each later one is reported against all rows seen before it.
        """
        if row_numbers is None:
            row_numbers = [DATA_START_ROW + index for index in range(len(records))]
        if len(row_numbers) != len(records):
            raise ValueError("row_numbers must have one entry per record")
        if len(set(row_numbers)) != len(row_numbers):
            raise ValueError("row_numbers must not repeat")
        labels = labels or {}

        issues: list[ValidationIssue] = []
        seen: dict[str, dict[str, list[int]]] = {name: {} for name in unique_fields}
        for index, record in enumerate(records):
            for name in unique_fields:
                value = record.get(name)
                if is_blank(value):
                    continue
                key = str(value).strip()
                previous = seen[name].get(key)
                if previous is None:
                    seen[name][key] = [index]
                    continue
                rows = ", ".join(str(row_numbers[i]) for i in previous)
                issues.append(ValidationIssue(
                    row=row_numbers[index],
                    column=name,
                    field=labels.get(name, name),
                    value=value,
                    error=f"Duplicate value found (also in row(s) {rows})",
                    code="duplicate_value",
                ))
                previous.append(index)
        return issues
