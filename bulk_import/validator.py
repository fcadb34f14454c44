"""
Bulk data validation orchestrator.

Runs the per-cell checks and the business rules on each record, then the
uniqueness checks across the whole upload, and folds everything into one
ValidationResult. Nothing here stops early: every record is evaluated and
every finding is reported.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Sequence

from bulk_import.business_rules import BusinessRuleValidator
from bulk_import.catalog import default_registry
from bulk_import.duplicates import DuplicateDetector
from bulk_import.field_rules import FieldValidator
from bulk_import.models import SEVERITY_ERROR, ValidationIssue, ValidationResult
from bulk_import.records import DATA_START_ROW, ParsedUpload
from bulk_import.schema import SchemaRegistry, TemplateType

__all__ = ["BulkDataValidator", "ValidationIssue", "ValidationResult", "validate_bulk_data"]

logger = logging.getLogger(__name__)


class BulkDataValidator:
    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        *,
        today: date | None = None,
        field_validator: FieldValidator | None = None,
        business_rules: BusinessRuleValidator | None = None,
        duplicate_detector: DuplicateDetector | None = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.field_validator = field_validator or FieldValidator(today=today)
        self.business_rules = business_rules or BusinessRuleValidator(today=today)
        self.duplicate_detector = duplicate_detector or DuplicateDetector()

    def validate(
        self,
        records: Sequence[Mapping[str, Any]],
        template_type: TemplateType | str,
        row_numbers: Sequence[int] | None = None,
    ) -> ValidationResult:
        fields = self.registry.fields_for(template_type)
        unique_fields = self.registry.unique_fields_for(template_type)
        if row_numbers is None:
            row_numbers = [DATA_START_ROW + index for index in range(len(records))]
        if len(row_numbers) != len(records):
            raise ValueError("row_numbers must have one entry per record")
        if len(set(row_numbers)) != len(row_numbers):
            raise ValueError("row_numbers must not repeat")

        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []
        invalid_rows: set[int] = set()

        for index, record in enumerate(records):
            row_number = row_numbers[index]
            findings: list[ValidationIssue] = []
            for template_field in fields:
                found = self.field_validator.validate(template_field, record.get(template_field.name), row_number)
                if found is not None:
                    findings.append(found)
            findings.extend(self.business_rules.validate(record, row_number))

            for finding in findings:
                if finding.severity == SEVERITY_ERROR:
                    errors.append(finding)
                    invalid_rows.add(index)
                else:
                    warnings.append(finding)

        if unique_fields:
            labels = {f.name: f.display_name for f in fields}
            duplicates = self.duplicate_detector.detect(records, unique_fields, row_numbers, labels)
            errors.extend(duplicates)
            row_index = {row: index for index, row in enumerate(row_numbers)}
            invalid_rows.update(row_index[issue.row] for issue in duplicates)

        positions = {f.name: position for position, f in enumerate(fields)}

        def order(issue: ValidationIssue) -> tuple[int, int]:
            return issue.row, positions.get(issue.column, len(positions))

        errors.sort(key=order)
        warnings.sort(key=order)

        validated = [dict(record) for index, record in enumerate(records) if index not in invalid_rows]
        resolved = TemplateType.parse(template_type)
        logger.info(
            "Validated %d %s row(s): %d valid, %d error(s), %d warning(s)",
            len(records),
            resolved.value,
            len(validated),
            len(errors),
            len(warnings),
        )
        return ValidationResult(
            total_rows=len(records),
            valid_rows=len(validated),
            invalid_rows=len(records) - len(validated),
            errors=errors,
            warnings=warnings,
            validated_data=validated,
        )

    def validate_upload(self, upload: ParsedUpload) -> ValidationResult:
        return self.validate(upload.records, upload.template_type, upload.row_numbers)


def validate_bulk_data(
    records: Sequence[Mapping[str, Any]],
    template_type: TemplateType | str,
    row_numbers: Sequence[int] | None = None,
) -> ValidationResult:
    return BulkDataValidator().validate(records, template_type, row_numbers)
