# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Schema-Driven Form Engine

Turns a plugin's ConfigSchema plus a node's current configuration into
editable field descriptors, validates edited values, and turns them back
into a configuration map.
"""

import re
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pipeline_studio.core.errors import NotFoundError, SchemaUnavailableError, ServiceUnavailableError
from pipeline_studio.core.logging import get_service_logger
from pipeline_studio.graph.models import NodeRole
from .controls import ControlKind, is_blank, render_policy
from .schema import ConfigField, ConfigSchema, SelectOption

logger = get_service_logger("forms")

# Form key under which the node's display name is edited next to the schema fields
DISPLAY_NAME_FIELD = "_display_name"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class FormValidationResult:
    """Either a clean configuration map or per-field errors, never both"""
    config: Optional[Dict[str, Any]] = None
    errors: Tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def errors_by_field(self) -> Dict[str, str]:
        return {e.field: e.message for e in self.errors}


@dataclass(frozen=True)
class FieldDescriptor:
    """What the view needs to render one control"""
    name: str
    label: str
    control: ControlKind
    required: bool
    value: Any
    type_tag: str
    description: Optional[str] = None
    choices: Tuple[SelectOption, ...] = field(default_factory=tuple)


def _check_rule(config_field: ConfigField, value: Any) -> Optional[str]:
    rule = config_field.validation
    if rule is None or is_blank(value):
        return None

    label = config_field.label or config_field.name

    if isinstance(value, str):
        if rule.min_length is not None and len(value) < rule.min_length:
            return rule.message or f"{label} must be at least {rule.min_length} characters"
        if rule.max_length is not None and len(value) > rule.max_length:
            return rule.message or f"{label} must be at most {rule.max_length} characters"
        if rule.pattern:
            try:
                matched = re.fullmatch(rule.pattern, value) is not None
            except re.error as e:
                logger.warning(f"Ignoring invalid pattern on field {config_field.name}: {e}")
                matched = True
            if not matched:
                return rule.message or f"{label} does not match the required format"
    elif isinstance(value, Real) and not isinstance(value, bool):
        if rule.min is not None and value < rule.min:
            return rule.message or f"{label} must be at least {rule.min:g}"
        if rule.max is not None and value > rule.max:
            return rule.message or f"{label} must be at most {rule.max:g}"

    return None


class FormEngine:
    """
    Resolves, binds, validates and serializes plugin configuration forms.

    Schemas are cached per (catalog kind, plugin type) for the session;
    a failed fetch caches nothing.
    """

    def __init__(self, client):
        self.client = client
        self._schemas: Dict[Tuple[str, str], ConfigSchema] = {}

    async def resolve_schema(self, role: NodeRole, plugin_type: str) -> ConfigSchema:
        """Fetch (or reuse) the schema for a node of the given role and plugin type"""
        kind = "transformer" if role == NodeRole.TRANSFORMER else "connector"
        key = (kind, plugin_type)
        if key in self._schemas:
            return self._schemas[key]

        try:
            if kind == "transformer":
                schema = await self.client.get_transformer_schema(plugin_type)
            else:
                schema = await self.client.get_connector_schema(plugin_type)
        except NotFoundError:
            raise SchemaUnavailableError(plugin_type) from None
        except ServiceUnavailableError as e:
            raise SchemaUnavailableError(
                plugin_type,
                f"Configuration schema for {plugin_type} could not be loaded: {e.message}"
            ) from e

        self._schemas[key] = schema
        logger.info(f"Resolved {kind} schema: {plugin_type} ({len(schema.fields)} fields)")
        return schema

    def cached_schema(self, role: NodeRole, plugin_type: str) -> Optional[ConfigSchema]:
        kind = "transformer" if role == NodeRole.TRANSFORMER else "connector"
        return self._schemas.get((kind, plugin_type))

    @staticmethod
    def bind_initial_values(
        schema: ConfigSchema,
        current_config: Mapping[str, Any],
        display_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """Current value, else schema default, else the control's empty value"""
        values: Dict[str, Any] = {}
        for config_field in schema.fields:
            if config_field.name in current_config:
                values[config_field.name] = current_config[config_field.name]
            elif config_field.default_value is not None:
                values[config_field.name] = config_field.default_value
            else:
                values[config_field.name] = render_policy(config_field.type).empty_value()

        if display_name is not None:
            values[DISPLAY_NAME_FIELD] = display_name
        return values

    @staticmethod
    def describe_fields(schema: ConfigSchema, values: Mapping[str, Any]) -> List[FieldDescriptor]:
        descriptors = []
        for config_field in schema.fields:
            policy = render_policy(config_field.type)
            descriptors.append(FieldDescriptor(
                name=config_field.name,
                label=config_field.label or config_field.name,
                control=policy.control,
                required=config_field.required,
                value=values.get(config_field.name, policy.empty_value()),
                type_tag=config_field.type,
                description=config_field.description,
                choices=config_field.choices,
            ))
        return descriptors

    @staticmethod
    def validate(schema: ConfigSchema, values: Mapping[str, Any]) -> FormValidationResult:
        """
        Check every field against its control policy and validation rule.

        Values for keys outside the schema are not carried into the clean
        configuration. An absent BOOLEAN takes its default.
        """
        errors: List[FieldError] = []
        clean: Dict[str, Any] = {}

        if DISPLAY_NAME_FIELD in values and is_blank(values[DISPLAY_NAME_FIELD]):
            errors.append(FieldError(DISPLAY_NAME_FIELD, "Node name is required"))

        for config_field in schema.fields:
            policy = render_policy(config_field.type)
            present = config_field.name in values
            value = values.get(config_field.name)
            if not present and policy.control == ControlKind.TOGGLE:
                value = config_field.default_value
                present = value is not None

            message = policy.check(config_field, value) or _check_rule(config_field, value)
            if message:
                errors.append(FieldError(config_field.name, message))
            elif present:
                clean[config_field.name] = value

        if errors:
            return FormValidationResult(errors=tuple(errors))
        return FormValidationResult(config=FormEngine.serialize(clean))

    @staticmethod
    def serialize(values: Mapping[str, Any]) -> Dict[str, Any]:
        """Committed values minus the display-name pseudo-field, verbatim"""
        return {key: value for key, value in values.items() if key != DISPLAY_NAME_FIELD}
