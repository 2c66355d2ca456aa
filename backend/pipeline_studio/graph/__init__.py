# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Pipeline graph model: node/edge arenas, structural invariants and
persisted pipeline shapes.
"""

from .exceptions import (
    CycleDetectedError,
    DuplicateNodeError,
    InvalidDirectionError,
    InvalidEndpointError,
    NodeNotFoundError,
    SelfLoopError,
    StructuralViolation,
)
from .model import GraphSnapshot, PipelineGraph
from .models import (
    ConnectionTestResult,
    ConnectorInfo,
    ExecutionResult,
    ExecutionStatus,
    NodeResult,
    NodeRole,
    Pipeline,
    PipelineEdge,
    PipelineNode,
    PipelineStatus,
    Position,
    TransformerInfo,
    derive_edge_id,
)

__all__ = [
    "CycleDetectedError",
    "DuplicateNodeError",
    "InvalidDirectionError",
    "InvalidEndpointError",
    "NodeNotFoundError",
    "SelfLoopError",
    "StructuralViolation",
    "GraphSnapshot",
    "PipelineGraph",
    "ConnectionTestResult",
    "ConnectorInfo",
    "ExecutionResult",
    "ExecutionStatus",
    "NodeResult",
    "NodeRole",
    "Pipeline",
    "PipelineEdge",
    "PipelineNode",
    "PipelineStatus",
    "Position",
    "TransformerInfo",
    "derive_edge_id",
]
