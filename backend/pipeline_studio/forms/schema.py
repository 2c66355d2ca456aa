# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Configuration Schema Models

Declarative description of a plugin's configurable fields, as served by
the catalog endpoints.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    PASSWORD = "PASSWORD"
    TEXTAREA = "TEXTAREA"
    SELECT = "SELECT"
    MULTI_SELECT = "MULTI_SELECT"
    JSON = "JSON"
    SQL = "SQL"
    FILE_PATH = "FILE_PATH"
    TABLE_SELECTOR = "TABLE_SELECTOR"
    COLUMN_MAPPING = "COLUMN_MAPPING"

    @classmethod
    def parse(cls, tag: str) -> Optional["FieldType"]:
        """Map a wire tag to a known type, or None for tags this client doesn't know"""
        try:
            return cls(tag)
        except ValueError:
            return None


class ValidationRule(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    message: Optional[str] = None


class SelectOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: Any
    label: str


class ConfigField(BaseModel):
    """One configurable field of a plugin"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    label: str = ""
    description: Optional[str] = None
    type: str = FieldType.STRING.value
    required: bool = False
    default_value: Any = Field(default=None, alias="defaultValue")
    options: Optional[Dict[str, Any]] = None
    validation: Optional[ValidationRule] = None

    @property
    def field_type(self) -> Optional[FieldType]:
        return FieldType.parse(self.type)

    @property
    def choices(self) -> Tuple[SelectOption, ...]:
        """
        Declared select choices.

        The catalog nests them as ``options["options"]``; entries are either
        ``{"value", "label"}`` mappings or bare values.
        """
        raw = (self.options or {}).get("options") or []
        choices = []
        for entry in raw:
            if isinstance(entry, dict) and "value" in entry:
                choices.append(SelectOption(value=entry["value"], label=str(entry.get("label", entry["value"]))))
            else:
                choices.append(SelectOption(value=entry, label=str(entry)))
        return tuple(choices)

    @property
    def choice_values(self) -> List[Any]:
        return [choice.value for choice in self.choices]


class ConfigSchema(BaseModel):
    """Field list for one plugin type; immutable once fetched"""
    model_config = ConfigDict(frozen=True)

    fields: Tuple[ConfigField, ...] = ()

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[ConfigField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None
