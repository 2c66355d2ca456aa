# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Schema-driven configuration forms.
"""

from .controls import RENDER_POLICIES, ControlKind, RenderPolicy, render_policy
from .engine import (
    DISPLAY_NAME_FIELD,
    FieldDescriptor,
    FieldError,
    FormEngine,
    FormValidationResult,
)
from .schema import ConfigField, ConfigSchema, FieldType, SelectOption, ValidationRule

__all__ = [
    "RENDER_POLICIES",
    "ControlKind",
    "RenderPolicy",
    "render_policy",
    "DISPLAY_NAME_FIELD",
    "FieldDescriptor",
    "FieldError",
    "FormEngine",
    "FormValidationResult",
    "ConfigField",
    "ConfigSchema",
    "FieldType",
    "SelectOption",
    "ValidationRule",
]
