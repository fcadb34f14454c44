"""Template generation and upload validation for bulk data entry."""

__version__ = "0.3.0"

from bulk_import.catalog import default_registry
from bulk_import.errors import BulkImportError, MalformedDocument, UnknownTemplateType
from bulk_import.schema import FieldType, SchemaRegistry, TemplateField, TemplateSection, TemplateType
from bulk_import.validator import BulkDataValidator, ValidationIssue, ValidationResult, validate_bulk_data

__all__ = [
    "BulkDataValidator",
    "BulkImportError",
    "FieldType",
    "MalformedDocument",
    "SchemaRegistry",
    "TemplateField",
    "TemplateSection",
    "TemplateType",
    "UnknownTemplateType",
    "ValidationIssue",
    "ValidationResult",
    "default_registry",
    "validate_bulk_data",
    "__version__",
]
