# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Pipeline Graph Model

In-memory directed graph of one pipeline. Nodes and edges live in two
id-keyed arenas; every mutation goes through one method that checks all
invariants first and only then touches the arenas, so a rejected mutation
leaves the graph exactly as it was.
"""

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pipeline_studio.core.logging import get_service_logger, log_event
from .exceptions import (
    DuplicateNodeError,
    InvalidDirectionError,
    InvalidEndpointError,
    NodeNotFoundError,
    SelfLoopError,
)
from .models import NodeRole, PipelineEdge, PipelineNode, Position

logger = get_service_logger("graph")


@dataclass(frozen=True)
class GraphSnapshot:
    """Immutable view of the graph after one mutation"""
    nodes: Tuple[PipelineNode, ...] = ()
    edges: Tuple[PipelineEdge, ...] = ()
    version: int = 0

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def edge_ids(self) -> List[str]:
        return [edge.id for edge in self.edges]

    def get_node(self, node_id: str) -> Optional[PipelineNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


SnapshotListener = Callable[[GraphSnapshot], None]
RemovalListener = Callable[[str], None]


class PipelineGraph:
    """
    Canonical node/edge graph for one pipeline.

    Invariants held after every operation:
    - node ids are unique
    - every edge references two present, distinct nodes
    - no edge enters a SOURCE or leaves a TARGET
    """

    def __init__(
        self,
        nodes: Iterable[PipelineNode] = (),
        edges: Iterable[PipelineEdge] = ()
    ):
        self._nodes: Dict[str, PipelineNode] = {}
        self._edges: Dict[str, PipelineEdge] = {}
        self._version = 0
        self._listeners: List[SnapshotListener] = []
        self._removal_listeners: List[RemovalListener] = []
        self._snapshot = GraphSnapshot()
        self.load(nodes, edges)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener; returns an unsubscribe callable"""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def on_node_removed(self, listener: RemovalListener) -> None:
        """Register a callback run inside remove_node, before snapshot publication"""
        self._removal_listeners.append(listener)

    def snapshot(self) -> GraphSnapshot:
        return self._snapshot

    @property
    def version(self) -> int:
        return self._version

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> PipelineNode:
        """Detached copy of a node; edits go through update_node"""
        return self._require(node_id).model_copy(deep=True)

    def get_edge(self, edge_id: str) -> Optional[PipelineEdge]:
        return self._edges.get(edge_id)

    def incoming(self, node_id: str) -> List[PipelineEdge]:
        return [e for e in self._edges.values() if e.target_node_id == node_id]

    def outgoing(self, node_id: str) -> List[PipelineEdge]:
        return [e for e in self._edges.values() if e.source_node_id == node_id]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_node(self, node: PipelineNode) -> PipelineNode:
        """Insert a node; its id must not collide with an existing one"""
        if node.id in self._nodes:
            raise DuplicateNodeError(node.id)

        self._nodes[node.id] = node.model_copy(deep=True)
        self._publish()
        log_event(logger, "node_added", node_id=node.id, role=node.role.value, plugin_type=node.plugin_type)
        return node.model_copy(deep=True)

    def update_node(
        self,
        node_id: str,
        *,
        name: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        position: Optional[Position] = None
    ) -> PipelineNode:
        """
        Merge non-structural changes into a node.

        Role and plugin type cannot change here: existing edges are only
        valid for the role they were connected under, so a role change is
        a delete followed by an add.
        """
        current = self._require(node_id)

        changes: Dict[str, Any] = {}
        if name is not None:
            changes["name"] = name
        if config is not None:
            changes["config"] = copy.deepcopy(config)
        if position is not None:
            changes["position"] = position
        if not changes:
            return current.model_copy(deep=True)

        updated = current.model_copy(update=changes)
        self._nodes[node_id] = updated
        self._publish()
        log_event(logger, "node_updated", level="DEBUG", node_id=node_id, fields=sorted(changes))
        return updated.model_copy(deep=True)

    def remove_node(self, node_id: str) -> List[PipelineEdge]:
        """
        Remove a node together with every incident edge.

        Removal listeners (selection) run before the new snapshot is
        published, so no observer sees the node gone while still selected.
        Returns the edges removed by the cascade.
        """
        if node_id not in self._nodes:
            raise NodeNotFoundError(node_id)

        cascaded = [edge for edge in self._edges.values() if edge.touches(node_id)]
        del self._nodes[node_id]
        for edge in cascaded:
            del self._edges[edge.id]

        for listener in list(self._removal_listeners):
            listener(node_id)

        self._publish()
        log_event(logger, "node_removed", node_id=node_id, cascaded_edges=[e.id for e in cascaded])
        return cascaded

    def connect(
        self,
        source_id: str,
        target_id: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None
    ) -> PipelineEdge:
        """Insert the edge source -> target, replacing one with the same derived id"""
        edge = PipelineEdge.between(source_id, target_id, source_handle, target_handle)
        self._check_edge(edge)

        replaced = edge.id in self._edges
        self._edges[edge.id] = edge
        self._publish()
        log_event(logger, "edge_connected", edge_id=edge.id, replaced=replaced)
        return edge

    def disconnect(self, edge_id: str) -> bool:
        """Remove an edge; unknown ids are a no-op. Returns whether anything was removed."""
        if edge_id not in self._edges:
            return False

        del self._edges[edge_id]
        self._publish()
        log_event(logger, "edge_disconnected", edge_id=edge_id)
        return True

    def load(self, nodes: Iterable[PipelineNode], edges: Iterable[PipelineEdge]) -> GraphSnapshot:
        """
        Replace the whole graph with a persisted definition.

        The definition is checked against the same invariants as add_node
        and connect before anything is replaced. Every previous node counts
        as removed, even if the new definition reuses its id.
        """
        new_nodes: Dict[str, PipelineNode] = {}
        for node in nodes:
            if node.id in new_nodes:
                raise DuplicateNodeError(node.id)
            new_nodes[node.id] = node.model_copy(deep=True)

        new_edges: Dict[str, PipelineEdge] = {}
        for edge in edges:
            self._check_edge(edge, new_nodes)
            new_edges[edge.id] = edge

        previous_ids = list(self._nodes)
        self._nodes = new_nodes
        self._edges = new_edges

        for node_id in previous_ids:
            for listener in list(self._removal_listeners):
                listener(node_id)

        self._publish()
        return self._snapshot

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_edge(self, edge: PipelineEdge, nodes: Optional[Dict[str, PipelineNode]] = None) -> None:
        nodes = self._nodes if nodes is None else nodes

        source = nodes.get(edge.source_node_id)
        if source is None:
            raise InvalidEndpointError(edge.source_node_id, "source")
        target = nodes.get(edge.target_node_id)
        if target is None:
            raise InvalidEndpointError(edge.target_node_id, "target")

        if edge.source_node_id == edge.target_node_id:
            raise SelfLoopError(edge.source_node_id)

        if source.role == NodeRole.TARGET:
            raise InvalidDirectionError(source.id, target.id, "a TARGET node has no outputs")
        if target.role == NodeRole.SOURCE:
            raise InvalidDirectionError(source.id, target.id, "a SOURCE node has no inputs")

    def _require(self, node_id: str) -> PipelineNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def _publish(self) -> None:
        self._version += 1
        # Snapshots never share mutable config with the arena
        self._snapshot = GraphSnapshot(
            nodes=tuple(node.model_copy(deep=True) for node in self._nodes.values()),
            edges=tuple(self._edges.values()),
            version=self._version,
        )
        for listener in list(self._listeners):
            listener(self._snapshot)
