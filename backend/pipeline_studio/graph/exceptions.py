# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Graph Exceptions

Structural violations raised by the graph model. A structural violation is
always rejected before anything is mutated.
"""

from pipeline_studio.core.errors import NotFoundError, ValidationError


class StructuralViolation(ValidationError):
    """Graph mutation would break a structural invariant"""
    pass


class DuplicateNodeError(StructuralViolation):
    """Node id already present in the graph"""
    def __init__(self, node_id: str):
        super().__init__(f"Duplicate node id: {node_id}", field="id")
        self.node_id = node_id


class NodeNotFoundError(NotFoundError):
    """Node id absent from the graph"""
    def __init__(self, node_id: str):
        super().__init__("Node", node_id)
        self.node_id = node_id


class InvalidEndpointError(StructuralViolation):
    """Edge endpoint references a node that is not in the graph"""
    def __init__(self, node_id: str, end: str):
        super().__init__(
            f"Edge {end} references non-existent node: {node_id}",
            field=f"{end}NodeId"
        )
        self.node_id = node_id
        self.end = end


class SelfLoopError(StructuralViolation):
    """Edge would connect a node to itself"""
    def __init__(self, node_id: str):
        super().__init__(f"Self-loop not allowed: {node_id} -> {node_id}", field="edges")
        self.node_id = node_id


class InvalidDirectionError(StructuralViolation):
    """Edge leaves a TARGET or enters a SOURCE"""
    def __init__(self, source_id: str, target_id: str, reason: str):
        super().__init__(
            f"Invalid edge direction {source_id} -> {target_id}: {reason}",
            field="edges"
        )
        self.source_id = source_id
        self.target_id = target_id


class CycleDetectedError(StructuralViolation):
    """Graph contains a directed cycle"""
    def __init__(self, node_ids):
        self.node_ids = sorted(node_ids)
        super().__init__(
            f"Cycle detected in pipeline graph involving nodes: {self.node_ids}",
            field="edges"
        )
