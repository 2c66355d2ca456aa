# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit tests for the schema-driven form engine
"""

import pytest
from unittest.mock import AsyncMock

from pipeline_studio.core.errors import NotFoundError, SchemaUnavailableError, ServiceUnavailableError
from pipeline_studio.forms.controls import ControlKind
from pipeline_studio.forms.engine import DISPLAY_NAME_FIELD, FormEngine
from pipeline_studio.forms.schema import ConfigField, ConfigSchema, ValidationRule
from pipeline_studio.graph.models import NodeRole


def schema_of(*fields):
    return ConfigSchema(fields=fields)


@pytest.fixture
def csv_schema():
    return ConfigSchema.model_validate({
        "fields": [
            {"name": "path", "label": "File Path", "type": "FILE_PATH", "required": True},
            {"name": "delimiter", "label": "Delimiter", "type": "STRING", "defaultValue": ","},
            {"name": "skipRows", "label": "Skip Rows", "type": "INTEGER"},
            {"name": "hasHeader", "label": "Has Header", "type": "BOOLEAN", "defaultValue": True},
            {"name": "encoding", "label": "Encoding", "type": "SELECT", "required": True,
             "options": {"options": [{"value": "UTF-8", "label": "UTF-8"}, {"value": "GBK", "label": "GBK"}]}},
        ]
    })


@pytest.fixture
def mock_client(csv_schema):
    client = AsyncMock()
    client.get_connector_schema = AsyncMock(return_value=csv_schema)
    client.get_transformer_schema = AsyncMock(return_value=schema_of(
        ConfigField(name="condition", label="Condition", type="STRING", required=True)
    ))
    return client


class TestResolveSchema:

    @pytest.mark.asyncio
    async def test_connector_roles_use_connector_schema(self, mock_client, csv_schema):
        """SOURCE and TARGET share one cached connector schema"""
        engine = FormEngine(mock_client)

        assert await engine.resolve_schema(NodeRole.SOURCE, "csv") is csv_schema
        assert await engine.resolve_schema(NodeRole.TARGET, "csv") is csv_schema

        mock_client.get_connector_schema.assert_awaited_once_with("csv")
        mock_client.get_transformer_schema.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transformer_role_uses_transformer_schema(self, mock_client):
        """TRANSFORMER nodes resolve through the transformer endpoint"""
        engine = FormEngine(mock_client)
        schema = await engine.resolve_schema(NodeRole.TRANSFORMER, "filter")
        assert schema.field_names() == ["condition"]
        mock_client.get_transformer_schema.assert_awaited_once_with("filter")

    @pytest.mark.asyncio
    async def test_unknown_plugin_type_raises_schema_unavailable(self, mock_client):
        """A 404 for the plugin type becomes SchemaUnavailableError"""
        mock_client.get_connector_schema.side_effect = NotFoundError("Connector", "nosql")
        engine = FormEngine(mock_client)

        with pytest.raises(SchemaUnavailableError, match="nosql"):
            await engine.resolve_schema(NodeRole.SOURCE, "nosql")
        assert engine.cached_schema(NodeRole.SOURCE, "nosql") is None

    @pytest.mark.asyncio
    async def test_transport_failure_is_not_cached(self, mock_client, csv_schema):
        """A failed resolution is retried on the next call"""
        mock_client.get_connector_schema.side_effect = [ServiceUnavailableError("down"), csv_schema]
        engine = FormEngine(mock_client)

        with pytest.raises(SchemaUnavailableError):
            await engine.resolve_schema(NodeRole.SOURCE, "csv")
        assert await engine.resolve_schema(NodeRole.SOURCE, "csv") is csv_schema


class TestBindInitialValues:

    def test_current_then_default_then_empty(self, csv_schema):
        """Values come from the node, then the schema default, then the empty value"""
        values = FormEngine.bind_initial_values(csv_schema, {"path": "/in.csv"}, "Orders")

        assert values == {
            "path": "/in.csv",
            "delimiter": ",",
            "skipRows": 0,
            "hasHeader": True,
            "encoding": "",
            DISPLAY_NAME_FIELD: "Orders",
        }

    def test_current_value_wins_over_default_even_when_falsy(self, csv_schema):
        """A stored False is not replaced by a True default"""
        values = FormEngine.bind_initial_values(csv_schema, {"hasHeader": False})
        assert values["hasHeader"] is False
        assert DISPLAY_NAME_FIELD not in values

    def test_describe_fields(self, csv_schema):
        """Field descriptors carry control kind, choices and required flag"""
        values = FormEngine.bind_initial_values(csv_schema, {})
        descriptors = FormEngine.describe_fields(csv_schema, values)

        assert [d.control for d in descriptors] == [
            ControlKind.TEXT,
            ControlKind.TEXT,
            ControlKind.NUMERIC,
            ControlKind.TOGGLE,
            ControlKind.SINGLE_CHOICE,
        ]
        assert [c.value for c in descriptors[4].choices] == ["UTF-8", "GBK"]
        assert descriptors[0].required is True


class TestValidate:

    def test_required_string_empty_fails_naming_field(self):
        """An empty required string fails with the field label"""
        schema = schema_of(ConfigField(name="host", label="Host", type="STRING", required=True))
        result = FormEngine.validate(schema, {"host": ""})

        assert not result.ok
        assert result.config is None
        assert result.errors_by_field() == {"host": "Host is required"}

    def test_required_string_missing_fails(self):
        """A missing required string fails the same way as an empty one"""
        schema = schema_of(ConfigField(name="host", label="Host", type="STRING", required=True))
        assert FormEngine.validate(schema, {}).errors_by_field() == {"host": "Host is required"}

    def test_required_string_non_empty_passes(self):
        """A filled required string passes into the config"""
        schema = schema_of(ConfigField(name="host", label="Host", type="STRING", required=True))
        result = FormEngine.validate(schema, {"host": "db.local"})
        assert result.ok
        assert result.config == {"host": "db.local"}

    @pytest.mark.parametrize("value", [1.5, 0.1, -2.25])
    def test_integer_rejects_fractional(self, value):
        """INTEGER fields reject fractional values"""
        schema = schema_of(ConfigField(name="n", label="Count", type="INTEGER"))
        result = FormEngine.validate(schema, {"n": value})
        assert result.errors_by_field() == {"n": "Count must be a whole number"}

    def test_integer_accepts_whole_numbers(self):
        """INTEGER fields accept whole numbers unchanged"""
        schema = schema_of(ConfigField(name="n", type="INTEGER", required=True))
        assert FormEngine.validate(schema, {"n": 3}).config == {"n": 3}

    def test_integer_beyond_float_range_is_valid(self):
        """An integer too large for a float validates without overflow"""
        schema = schema_of(ConfigField(name="n", label="Count", type="INTEGER"))
        result = FormEngine.validate(schema, {"n": 10 ** 400})
        assert result.ok
        assert result.config == {"n": 10 ** 400}

    def test_required_number_must_be_present(self):
        """Zero counts as present for a required number"""
        schema = schema_of(ConfigField(name="ratio", label="Ratio", type="NUMBER", required=True))
        assert FormEngine.validate(schema, {"ratio": None}).errors_by_field() == {"ratio": "Ratio is required"}
        assert FormEngine.validate(schema, {"ratio": 0}).ok

    def test_boolean_absent_takes_default(self):
        """An absent toggle takes its schema default"""
        schema = schema_of(ConfigField(name="flag", type="BOOLEAN", default_value=True))
        assert FormEngine.validate(schema, {}).config == {"flag": True}

    def test_select_must_be_declared_option(self, csv_schema):
        """A select value must be one of the declared options"""
        result = FormEngine.validate(csv_schema, {"path": "/a", "encoding": "LATIN-1"})
        assert result.errors_by_field() == {"encoding": "Encoding must be one of: UTF-8, GBK"}

    def test_required_select_empty_fails(self, csv_schema):
        """An empty required select fails"""
        result = FormEngine.validate(csv_schema, {"path": "/a", "encoding": ""})
        assert result.errors_by_field() == {"encoding": "Encoding is required"}

    def test_multi_select(self):
        """Multi-select needs a choice when required and only declared ones"""
        field = ConfigField(
            name="groupBy", label="Group By", type="MULTI_SELECT", required=True,
            options={"options": ["region", "day"]},
        )
        schema = schema_of(field)
        assert FormEngine.validate(schema, {"groupBy": []}).errors_by_field() == {"groupBy": "Group By is required"}
        assert FormEngine.validate(schema, {"groupBy": ["month"]}).errors_by_field() == {
            "groupBy": "Group By has unknown choices: month"
        }
        assert FormEngine.validate(schema, {"groupBy": ["day"]}).config == {"groupBy": ["day"]}

    def test_json_content_is_not_parsed(self):
        """Structured text is stored as typed, without parsing"""
        schema = schema_of(ConfigField(name="mapping", type="COLUMN_MAPPING", required=True))
        assert FormEngine.validate(schema, {"mapping": "{not json"}).config == {"mapping": "{not json"}

    def test_length_rule_uses_custom_message(self):
        """A rule's own message replaces the default one"""
        field = ConfigField(
            name="delimiter", type="STRING",
            validation=ValidationRule(max_length=1, message="One character only"),
        )
        result = FormEngine.validate(schema_of(field), {"delimiter": ";;"})
        assert result.errors_by_field() == {"delimiter": "One character only"}

    def test_min_length_default_message(self):
        """min_length without a message uses the default wording"""
        field = ConfigField(name="code", label="Code", type="STRING", validation=ValidationRule(min_length=3))
        result = FormEngine.validate(schema_of(field), {"code": "ab"})
        assert result.errors_by_field() == {"code": "Code must be at least 3 characters"}

    def test_numeric_bounds(self):
        """min and max are inclusive bounds"""
        field = ConfigField.model_validate({
            "name": "batchSize", "label": "Batch Size", "type": "INTEGER",
            "validation": {"min": 1, "max": 100},
        })
        schema = schema_of(field)
        assert FormEngine.validate(schema, {"batchSize": 0}).errors_by_field() == {
            "batchSize": "Batch Size must be at least 1"
        }
        assert FormEngine.validate(schema, {"batchSize": 101}).errors_by_field() == {
            "batchSize": "Batch Size must be at most 100"
        }
        assert FormEngine.validate(schema, {"batchSize": 100}).ok

    def test_pattern_must_match_whole_value(self):
        """A pattern must match the entire value"""
        field = ConfigField(
            name="url", label="URL", type="STRING",
            validation=ValidationRule(pattern="jdbc:.+", message="Must be a jdbc: URL"),
        )
        schema = schema_of(field)
        assert FormEngine.validate(schema, {"url": "http://x"}).errors_by_field() == {"url": "Must be a jdbc: URL"}
        assert FormEngine.validate(schema, {"url": "jdbc:pg://x"}).ok

    def test_rule_skipped_for_empty_optional_value(self):
        """Rules do not apply to an empty optional field"""
        field = ConfigField(name="code", type="STRING", validation=ValidationRule(min_length=3))
        assert FormEngine.validate(schema_of(field), {"code": ""}).ok

    def test_all_errors_reported_and_nothing_partially_applied(self, csv_schema):
        """Every failing field is reported and no config is produced"""
        result = FormEngine.validate(csv_schema, {"path": "", "skipRows": 1.5, "encoding": "UTF-8"})
        assert set(result.errors_by_field()) == {"path", "skipRows"}
        assert result.config is None

    def test_blank_display_name_rejected(self):
        """The node name is validated with the fields"""
        schema = schema_of(ConfigField(name="host", type="STRING"))
        result = FormEngine.validate(schema, {DISPLAY_NAME_FIELD: "", "host": "x"})
        assert result.errors_by_field() == {DISPLAY_NAME_FIELD: "Node name is required"}

    def test_unknown_keys_dropped_and_display_name_excluded(self):
        """The config holds only schema fields"""
        schema = schema_of(ConfigField(name="host", type="STRING"))
        result = FormEngine.validate(schema, {DISPLAY_NAME_FIELD: "Db", "host": "x", "stale": 1})
        assert result.config == {"host": "x"}


def test_serialize_excludes_display_name_only():
    """serialize drops the display name and nothing else"""
    values = {DISPLAY_NAME_FIELD: "Orders", "path": "/a", "limit": 5, "flag": False}
    assert FormEngine.serialize(values) == {"path": "/a", "limit": 5, "flag": False}
