# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Canvas Adapter

Translates graph snapshots into the elements a graph-drawing view renders,
and canvas gestures back into graph mutations. The adapter only reads
snapshots; every change goes through the graph or the controller.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from pipeline_studio.core.logging import get_service_logger
from pipeline_studio.graph.exceptions import NodeNotFoundError, StructuralViolation
from pipeline_studio.graph.model import GraphSnapshot, PipelineGraph
from pipeline_studio.graph.models import NodeRole, PipelineEdge, Position

logger = get_service_logger("canvas")

NODE_TYPE = "pipelineNode"
EDGE_TYPE = "smoothstep"
EDGE_STROKE = "#1890ff"
EDGE_STROKE_WIDTH = 2
SELECTED_BORDER = "#1890ff"
UNKNOWN_ROLE_COLOR = "#999"


@dataclass(frozen=True)
class NodeColors:
    background: str
    border: str
    icon: str


ROLE_COLORS = {
    NodeRole.SOURCE: NodeColors(background="#e6f7ff", border="#1890ff", icon="#1890ff"),
    NodeRole.TRANSFORMER: NodeColors(background="#fff7e6", border="#fa8c16", icon="#fa8c16"),
    NodeRole.TARGET: NodeColors(background="#f6ffed", border="#52c41a", icon="#52c41a"),
}


@dataclass(frozen=True)
class VisualNode:
    id: str
    label: str
    role: NodeRole
    plugin_type: str
    position: Position
    colors: NodeColors
    has_input_handle: bool
    has_output_handle: bool
    selected: bool = False
    type: str = NODE_TYPE

    @property
    def border_color(self) -> str:
        return SELECTED_BORDER if self.selected else self.colors.border


@dataclass(frozen=True)
class VisualEdge:
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    type: str = EDGE_TYPE
    animated: bool = True
    stroke: str = EDGE_STROKE
    stroke_width: int = EDGE_STROKE_WIDTH


@dataclass(frozen=True)
class CanvasView:
    nodes: Tuple[VisualNode, ...]
    edges: Tuple[VisualEdge, ...]
    version: int


@dataclass(frozen=True)
class GestureRejected:
    """A gesture the graph refused; carries the reason for the view to show"""
    reason: str
    error: StructuralViolation


def minimap_color(role) -> str:
    colors = ROLE_COLORS.get(role)
    return colors.border if colors else UNKNOWN_ROLE_COLOR


def snap(value: float, grid: int) -> float:
    if grid <= 0:
        return value
    return round(value / grid) * grid


class CanvasAdapter:
    """Two-way translation between the graph model and a node canvas"""

    def __init__(self, graph: PipelineGraph, controller, snap_grid: int = 15):
        self.graph = graph
        self.controller = controller
        self.snap_grid = snap_grid

    # ------------------------------------------------------------------
    # Model -> view
    # ------------------------------------------------------------------

    def to_visual_nodes(self, snapshot: GraphSnapshot, selected_id: Optional[str] = None) -> Tuple[VisualNode, ...]:
        return tuple(
            VisualNode(
                id=node.id,
                label=node.name,
                role=node.role,
                plugin_type=node.plugin_type,
                position=node.position,
                colors=ROLE_COLORS[node.role],
                has_input_handle=node.role != NodeRole.SOURCE,
                has_output_handle=node.role != NodeRole.TARGET,
                selected=node.id == selected_id,
            )
            for node in snapshot.nodes
        )

    @staticmethod
    def to_visual_edges(snapshot: GraphSnapshot) -> Tuple[VisualEdge, ...]:
        return tuple(
            VisualEdge(
                id=edge.id,
                source=edge.source_node_id,
                target=edge.target_node_id,
                source_handle=edge.source_handle,
                target_handle=edge.target_handle,
            )
            for edge in snapshot.edges
        )

    def render(self) -> CanvasView:
        snapshot = self.graph.snapshot()
        return CanvasView(
            nodes=self.to_visual_nodes(snapshot, self.controller.selected_id),
            edges=self.to_visual_edges(snapshot),
            version=snapshot.version,
        )

    # ------------------------------------------------------------------
    # Gestures -> model
    # ------------------------------------------------------------------

    def on_connect(
        self,
        source: Optional[str],
        target: Optional[str],
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None
    ) -> Union[PipelineEdge, GestureRejected, None]:
        """Handle a completed drag between two handles; an incomplete drag is ignored"""
        if not source or not target:
            return None
        try:
            return self.graph.connect(source, target, source_handle or None, target_handle or None)
        except StructuralViolation as e:
            logger.info(f"Rejected connection {source} -> {target}: {e.message}")
            return GestureRejected(reason=e.message, error=e)

    def on_node_drag_stop(self, node_id: str, x: float, y: float) -> Optional[Position]:
        position = Position(x=snap(x, self.snap_grid), y=snap(y, self.snap_grid))
        try:
            self.graph.update_node(node_id, position=position)
        except NodeNotFoundError:
            # Node was deleted while being dragged
            logger.debug(f"Drag ended on removed node {node_id}")
            return None
        return position

    async def on_node_click(self, node_id: str):
        return await self.controller.select(node_id)

    async def on_pane_click(self) -> None:
        await self.controller.select(None)

    def on_edge_remove(self, edge_id: str) -> bool:
        return self.graph.disconnect(edge_id)
