# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Pipeline Models

Pydantic models for pipeline definitions, plugin descriptors and
execution results. Field names follow the backend's camelCase wire
format through aliases; Python code uses snake_case.
"""

from enum import Enum
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


class NodeRole(str, Enum):
    """Role of a node in the data flow; fixed at creation"""
    SOURCE = "SOURCE"
    TRANSFORMER = "TRANSFORMER"
    TARGET = "TARGET"


class PipelineStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


class ExecutionStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({
    ExecutionStatus.COMPLETED,
    ExecutionStatus.FAILED,
    ExecutionStatus.CANCELLED,
})


class Position(BaseModel):
    """Canvas position - layout only, no execution semantics"""
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class PipelineNode(BaseModel):
    """A plugin instance placed on the canvas"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    role: NodeRole = Field(alias="type")
    plugin_type: str = Field(alias="pluginType")
    config: Dict[str, Any] = Field(default_factory=dict)
    position: Position = Field(default_factory=Position)


def derive_edge_id(
    source_id: str,
    target_id: str,
    source_handle: Optional[str] = None,
    target_handle: Optional[str] = None
) -> str:
    """
    Derive the edge id from its endpoints.

    Default ports keep the plain ``edge-{source}-{target}`` form, so a
    reconnection between the same pair replaces the earlier edge. Named
    handles are folded in, which lets distinct ports carry parallel edges.
    """
    if source_handle is None and target_handle is None:
        return f"edge-{source_id}-{target_id}"
    return f"edge-{source_id}:{source_handle or ''}-{target_id}:{target_handle or ''}"


class PipelineEdge(BaseModel):
    """Directed connection between two nodes"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    source_node_id: str = Field(alias="sourceNodeId")
    target_node_id: str = Field(alias="targetNodeId")
    source_handle: Optional[str] = Field(default=None, alias="sourceHandle")
    target_handle: Optional[str] = Field(default=None, alias="targetHandle")

    @classmethod
    def between(
        cls,
        source_id: str,
        target_id: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None
    ) -> "PipelineEdge":
        return cls(
            id=derive_edge_id(source_id, target_id, source_handle, target_handle),
            source_node_id=source_id,
            target_node_id=target_id,
            source_handle=source_handle,
            target_handle=target_handle,
        )

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source_node_id, self.target_node_id)


class Pipeline(BaseModel):
    """Pipeline definition - the persisted unit of work"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    nodes: List[PipelineNode] = Field(default_factory=list)
    edges: List[PipelineEdge] = Field(default_factory=list)
    variables: Optional[Dict[str, Any]] = None
    status: PipelineStatus = PipelineStatus.DRAFT
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Pipeline name must not be empty")
        return value

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the backend's persisted shape"""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ConnectorInfo(BaseModel):
    """Connector plugin descriptor from the catalog"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    display_name: str = Field(alias="displayName")
    description: str = ""
    supports_read: bool = Field(default=False, alias="supportsRead")
    supports_write: bool = Field(default=False, alias="supportsWrite")


class TransformerInfo(BaseModel):
    """Transformer plugin descriptor from the catalog"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    display_name: str = Field(alias="displayName")
    description: str = ""
    supports_multiple_inputs: bool = Field(default=False, alias="supportsMultipleInputs")


class NodeResult(BaseModel):
    """Per-node metrics of one execution"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    node_id: str = Field(alias="nodeId")
    node_name: Optional[str] = Field(default=None, alias="nodeName")
    records_read: int = Field(default=0, alias="recordsRead")
    records_written: int = Field(default=0, alias="recordsWritten")
    duration_ms: int = Field(default=0, alias="durationMs")
    status: str = ""
    error_message: Optional[str] = Field(default=None, alias="errorMessage")


class ExecutionResult(BaseModel):
    """Result reported by the remote engine - read-only for the editor"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    execution_id: str = Field(alias="executionId")
    pipeline_id: str = Field(alias="pipelineId")
    status: ExecutionStatus
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    total_records_processed: int = Field(default=0, alias="totalRecordsProcessed")
    node_results: List[NodeResult] = Field(default_factory=list, alias="nodeResults")
    error_message: Optional[str] = Field(default=None, alias="errorMessage")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class ConnectionTestResult(BaseModel):
    """Outcome of a connector connectivity check"""
    success: bool
    message: str = ""
