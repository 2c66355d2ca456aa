# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Selection & Editing Controller

Single source of truth for which node is being edited, and the funnel
through which configuration and structural edits reach the graph.
"""

import random
import uuid
from typing import Any, Dict, Mapping, Optional, Set

from pipeline_studio.core.config import Config
from pipeline_studio.core.errors import (
    NoSelectionError,
    SchemaUnavailableError,
    ServiceUnavailableError,
    ValidationError,
    sanitize_error_for_user,
)
from pipeline_studio.core.logging import get_service_logger, log_event
from pipeline_studio.forms.engine import DISPLAY_NAME_FIELD, FormEngine, FormValidationResult
from pipeline_studio.forms.schema import ConfigSchema
from pipeline_studio.graph.model import PipelineGraph
from pipeline_studio.graph.models import ConnectionTestResult, NodeRole, PipelineNode, Position

logger = get_service_logger("editor")


class EditingController:
    """
    Tracks the selected node and routes edits into the graph.

    The selection is a weak reference by id: removing the node from the
    graph clears it, together with the active schema and form values.
    Edits are only applied on an explicit commit; switching the selection
    discards uncommitted form values.
    """

    def __init__(
        self,
        graph: PipelineGraph,
        form_engine: FormEngine,
        catalog,
        client,
        config: Config,
        rng: Optional[random.Random] = None
    ):
        self.graph = graph
        self.form_engine = form_engine
        self.catalog = catalog
        self.client = client
        self.config = config
        self._rng = rng or random.Random()
        self._issued_ids: Set[str] = set()

        self._selected_id: Optional[str] = None
        self._active_schema: Optional[ConfigSchema] = None
        self._form_values: Dict[str, Any] = {}
        self._selection_seq = 0

        graph.on_node_removed(self._handle_node_removed)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_node(self) -> Optional[PipelineNode]:
        if self._selected_id is None:
            return None
        return self.graph.get_node(self._selected_id)

    @property
    def active_schema(self) -> Optional[ConfigSchema]:
        return self._active_schema

    @property
    def form_values(self) -> Dict[str, Any]:
        return dict(self._form_values)

    async def select(self, node_id: Optional[str]) -> Optional[ConfigSchema]:
        """
        Make node_id the edited node (None clears the selection).

        Resolves the node's schema and binds its current values. If the
        schema can't be resolved the node stays selected without a form and
        SchemaUnavailableError propagates. A resolution that finishes after
        the selection moved on is dropped.
        """
        if node_id is None:
            self.clear_selection()
            return None

        # Unknown ids raise here, before the current selection is touched
        node = self.graph.get_node(node_id)

        self._selection_seq += 1
        seq = self._selection_seq
        self._selected_id = node_id
        self._active_schema = None
        self._form_values = {}

        schema = await self.form_engine.resolve_schema(node.role, node.plugin_type)

        if seq != self._selection_seq or self._selected_id != node_id:
            logger.debug(f"Discarding stale schema resolution for node {node_id}")
            return None

        # The node may have been edited while the schema was loading
        node = self.graph.get_node(node_id)
        self._active_schema = schema
        self._form_values = FormEngine.bind_initial_values(schema, node.config, node.name)
        return schema

    def clear_selection(self) -> None:
        self._selection_seq += 1
        self._selected_id = None
        self._active_schema = None
        self._form_values = {}

    def _handle_node_removed(self, node_id: str) -> None:
        if node_id == self._selected_id:
            self.clear_selection()
            log_event(logger, "selection_cleared", node_id=node_id)

    # ------------------------------------------------------------------
    # Configuration edits
    # ------------------------------------------------------------------

    def commit_config(self, node_id: str, name: str, values: Mapping[str, Any]) -> FormValidationResult:
        """
        Validate and, only if clean, write name and configuration to the node.

        Returns the validation result; on failure the graph is untouched.
        """
        node = self.graph.get_node(node_id)
        schema = self._schema_for(node)

        result = self.form_engine.validate(schema, {**values, DISPLAY_NAME_FIELD: name})
        if not result.ok:
            log_event(logger, "config_rejected", node_id=node_id, fields=sorted(result.errors_by_field()))
            return result

        updated = self.graph.update_node(node_id, name=name, config=result.config)
        if node_id == self._selected_id:
            self._form_values = FormEngine.bind_initial_values(schema, updated.config, updated.name)
        log_event(logger, "config_committed", node_id=node_id)
        return result

    async def test_connection(self, values: Optional[Mapping[str, Any]] = None) -> ConnectionTestResult:
        """
        Test the selected connector with the given (or current form) values.

        Transport failures come back as an unsuccessful result.
        """
        node = self.selected_node
        if node is None:
            raise NoSelectionError()
        if node.role == NodeRole.TRANSFORMER:
            raise ValidationError("Connection test is only available for connectors", field="type")

        schema = self._schema_for(node)
        candidate = dict(self._form_values if values is None else values)
        candidate.setdefault(DISPLAY_NAME_FIELD, node.name)

        result = self.form_engine.validate(schema, candidate)
        if not result.ok:
            raise ValidationError(
                "Configuration is invalid",
                details={"errors": result.errors_by_field()},
            )

        try:
            outcome = await self.client.test_connection(node.plugin_type, result.config)
        except ServiceUnavailableError as e:
            return ConnectionTestResult(success=False, message=sanitize_error_for_user(e, include_type=False))

        log_event(logger, "connection_tested", node_id=node.id, success=outcome.success)
        return outcome

    def _schema_for(self, node: PipelineNode) -> ConfigSchema:
        if node.id == self._selected_id and self._active_schema is not None:
            return self._active_schema
        schema = self.form_engine.cached_schema(node.role, node.plugin_type)
        if schema is None:
            raise SchemaUnavailableError(node.plugin_type)
        return schema

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def create_node(self, role: NodeRole, plugin_type: str, display_name: Optional[str] = None) -> PipelineNode:
        """Add a fresh, unconfigured node near the top-left of the viewport"""
        if display_name is None:
            base = self.catalog.display_name_for(role, plugin_type)
            same_type = sum(1 for n in self.graph.snapshot().nodes if n.plugin_type == plugin_type)
            display_name = f"{base} {same_type + 1}"

        origin_x, origin_y = self.config.node_spawn_origin
        spread = self.config.node_spawn_spread
        node = PipelineNode(
            id=self._next_node_id(),
            name=display_name,
            role=role,
            plugin_type=plugin_type,
            config={},
            position=Position(
                x=origin_x + self._rng.random() * spread,
                y=origin_y + self._rng.random() * spread,
            ),
        )
        return self.graph.add_node(node)

    def delete_selected(self) -> Optional[str]:
        """Remove the selected node (and its edges); returns its id"""
        node_id = self._selected_id
        if node_id is None:
            return None
        self.graph.remove_node(node_id)
        return node_id

    def _next_node_id(self) -> str:
        while True:
            node_id = f"node-{uuid.uuid4().hex[:12]}"
            if node_id not in self._issued_ids and not self.graph.has_node(node_id):
                self._issued_ids.add(node_id)
                return node_id
