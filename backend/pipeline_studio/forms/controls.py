# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Field type → control mapping.

RENDER_POLICIES is the one place that decides how a field type is shown
and what counts as a valid value for it. Adding a field type means adding
one row here.
"""

from dataclasses import dataclass
from enum import Enum
from numbers import Integral, Real
from typing import Any, Callable, Dict, Optional

from .schema import ConfigField, FieldType


class ControlKind(str, Enum):
    TEXT = "text"
    MASKED_TEXT = "masked_text"
    MULTILINE_TEXT = "multiline_text"
    NUMERIC = "numeric"
    TOGGLE = "toggle"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    STRUCTURED_TEXT = "structured_text"


FieldCheck = Callable[[ConfigField, Any], Optional[str]]


@dataclass(frozen=True)
class RenderPolicy:
    """How one field type is rendered and checked"""
    control: ControlKind
    empty_value: Callable[[], Any]
    check: FieldCheck


def is_blank(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple, dict)) and len(value) == 0)


def required_message(field: ConfigField) -> str:
    return f"{field.label or field.name} is required"


def _check_text(field: ConfigField, value: Any) -> Optional[str]:
    if is_blank(value):
        return required_message(field) if field.required else None
    if not isinstance(value, str):
        return f"{field.label or field.name} must be text"
    return None


def _check_structured(field: ConfigField, value: Any) -> Optional[str]:
    # Content is parsed by the consumer; only presence is checked here
    if is_blank(value):
        return required_message(field) if field.required else None
    if not isinstance(value, (str, dict, list)):
        return f"{field.label or field.name} must be serialized structured data"
    return None


def _check_numeric(integer: bool) -> FieldCheck:
    def check(field: ConfigField, value: Any) -> Optional[str]:
        if value is None or value == "":
            return required_message(field) if field.required else None
        if isinstance(value, bool) or not isinstance(value, Real):
            return f"{field.label or field.name} must be a number"
        if integer and not isinstance(value, Integral) and value % 1 != 0:
            return f"{field.label or field.name} must be a whole number"
        return None
    return check


def _check_toggle(field: ConfigField, value: Any) -> Optional[str]:
    return None


def _check_single_choice(field: ConfigField, value: Any) -> Optional[str]:
    if is_blank(value):
        return required_message(field) if field.required else None
    allowed = field.choice_values
    if allowed and value not in allowed:
        return f"{field.label or field.name} must be one of: {', '.join(map(str, allowed))}"
    return None


def _check_multi_choice(field: ConfigField, value: Any) -> Optional[str]:
    if is_blank(value):
        return required_message(field) if field.required else None
    if not isinstance(value, (list, tuple)):
        return f"{field.label or field.name} must be a list of choices"
    allowed = field.choice_values
    unknown = [item for item in value if allowed and item not in allowed]
    if unknown:
        return f"{field.label or field.name} has unknown choices: {', '.join(map(str, unknown))}"
    return None


_TEXT = RenderPolicy(ControlKind.TEXT, lambda: "", _check_text)

RENDER_POLICIES: Dict[FieldType, RenderPolicy] = {
    FieldType.STRING: _TEXT,
    FieldType.FILE_PATH: _TEXT,
    FieldType.TABLE_SELECTOR: _TEXT,
    FieldType.PASSWORD: RenderPolicy(ControlKind.MASKED_TEXT, lambda: "", _check_text),
    FieldType.TEXTAREA: RenderPolicy(ControlKind.MULTILINE_TEXT, lambda: "", _check_text),
    FieldType.SQL: RenderPolicy(ControlKind.MULTILINE_TEXT, lambda: "", _check_text),
    FieldType.NUMBER: RenderPolicy(ControlKind.NUMERIC, lambda: 0, _check_numeric(integer=False)),
    FieldType.INTEGER: RenderPolicy(ControlKind.NUMERIC, lambda: 0, _check_numeric(integer=True)),
    FieldType.BOOLEAN: RenderPolicy(ControlKind.TOGGLE, lambda: False, _check_toggle),
    FieldType.SELECT: RenderPolicy(ControlKind.SINGLE_CHOICE, lambda: "", _check_single_choice),
    FieldType.MULTI_SELECT: RenderPolicy(ControlKind.MULTI_CHOICE, list, _check_multi_choice),
    FieldType.JSON: RenderPolicy(ControlKind.STRUCTURED_TEXT, lambda: "", _check_structured),
    FieldType.COLUMN_MAPPING: RenderPolicy(ControlKind.STRUCTURED_TEXT, lambda: "", _check_structured),
}

FALLBACK_POLICY = _TEXT


def render_policy(type_tag: str) -> RenderPolicy:
    """Policy for a wire type tag; unknown tags render as single-line text"""
    return RENDER_POLICIES.get(FieldType.parse(type_tag), FALLBACK_POLICY)
