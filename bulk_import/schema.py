"""Field/section schema model and the registry that maps template types to it."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Iterable, Mapping

from bulk_import.errors import UnknownTemplateType


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    DROPDOWN = "dropdown"


class TemplateType(str, Enum):
    DEVICES = "devices"
    MARKETPLACE_LISTINGS = "marketplace_listings"
    LOST_REPORTS = "lost_reports"
    FOUND_REPORTS = "found_reports"
    REPAIR_LOGS = "repair_logs"
    INSURANCE_POLICIES = "insurance_policies"

    @classmethod
    def parse(cls, value: "TemplateType | str") -> "TemplateType":
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        for member in cls:
            if member.value == token:
                return member
        raise UnknownTemplateType(value, [member.value for member in cls])


@dataclass(frozen=True)
class TemplateField:
    name: str
    display_name: str
    type: FieldType
    required: bool = False
    example: str = ""
    max_length: int | None = None
    pattern: str | None = None
    options: tuple[str, ...] = ()
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", FieldType(self.type))
        object.__setattr__(self, "options", tuple(self.options or ()))
        if self.type is FieldType.DROPDOWN and not self.options:
            raise ValueError(f"Dropdown field '{self.name}' needs at least one option")
        if self.pattern is not None:
            try:
                re.compile(self.pattern, re.ASCII)
            except re.error as exc:
                raise ValueError(f"Field '{self.name}' has an invalid pattern {self.pattern!r}: {exc}") from exc
        if self.max_length is not None and self.max_length <= 0:
            raise ValueError(f"Field '{self.name}' max_length must be positive")

    @cached_property
    def compiled_pattern(self) -> re.Pattern[str] | None:
        return re.compile(self.pattern, re.ASCII) if self.pattern is not None else None

    @cached_property
    def option_lookup(self) -> frozenset[str]:
        return frozenset(option.lower() for option in self.options)

    def rule_tokens(self) -> list[str]:
        """Self-documenting rule list shown in row 4 of generated templates."""
        tokens = [self.type.value]
        if self.required:
            tokens.append("required")
        if self.max_length:
            tokens.append(f"max:{self.max_length}")
        if self.pattern:
            tokens.append(f"pattern:{self.pattern}")
        if self.options:
            tokens.append("options:" + "|".join(self.options))
        return tokens


@dataclass(frozen=True)
class TemplateSection:
    name: str
    fields: tuple[TemplateField, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


class SchemaRegistry:
    """
    Immutable catalog of sections per template type.

    Every TemplateType member must be mapped; there is no fallback schema,
    so a missing mapping fails at construction rather than at upload time.
    Pass require_all=False for partial registries (synthetic test schemas);
    lookups of unmapped types then raise UnknownTemplateType.
    """

    def __init__(
        self,
        sections: Mapping[TemplateType | str, Iterable[TemplateSection]],
        unique_fields: Mapping[TemplateType | str, Iterable[str]] | None = None,
        *,
        require_all: bool = True,
    ) -> None:
        self._sections: dict[TemplateType, tuple[TemplateSection, ...]] = {}
        for key, value in sections.items():
            self._sections[TemplateType.parse(key)] = tuple(value)

        missing = [member.value for member in TemplateType if member not in self._sections]
        if require_all and missing:
            raise ValueError(f"Schema registry is missing template types: {', '.join(missing)}")

        self._fields: dict[TemplateType, tuple[TemplateField, ...]] = {}
        for template_type, template_sections in self._sections.items():
            flattened = tuple(f for section in template_sections for f in section.fields)
            names = [f.name for f in flattened]
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise ValueError(
                    f"Template '{template_type.value}' repeats field names: {', '.join(duplicates)}"
                )
            self._fields[template_type] = flattened

        self._unique: dict[TemplateType, tuple[str, ...]] = {member: () for member in self._sections}
        for key, names in (unique_fields or {}).items():
            template_type = self._resolve(key)
            names = tuple(names)
            known = {f.name for f in self._fields[template_type]}
            unknown = [name for name in names if name not in known]
            if unknown:
                raise ValueError(
                    f"Unique fields {unknown} are not columns of template '{template_type.value}'"
                )
            self._unique[template_type] = names

    @property
    def template_types(self) -> list[TemplateType]:
        return list(self._sections)

    def sections_for(self, template_type: TemplateType | str) -> tuple[TemplateSection, ...]:
        return self._sections[self._resolve(template_type)]

    def fields_for(self, template_type: TemplateType | str) -> tuple[TemplateField, ...]:
        return self._fields[self._resolve(template_type)]

    def unique_fields_for(self, template_type: TemplateType | str) -> tuple[str, ...]:
        return self._unique[self._resolve(template_type)]

    def field_named(self, template_type: TemplateType | str, name: str) -> TemplateField | None:
        for template_field in self.fields_for(template_type):
            if template_field.name == name:
                return template_field
        return None

    def _resolve(self, template_type: TemplateType | str) -> TemplateType:
        resolved = TemplateType.parse(template_type)
        if resolved not in self._sections:
            raise UnknownTemplateType(template_type, [member.value for member in self._sections])
        return resolved
