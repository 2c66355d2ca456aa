# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Pipeline Graph Analysis

Topological ordering (Kahn's algorithm) and a pre-flight report of
conditions the execution engine is likely to reject. The report is
advisory: executability is decided remotely.
"""

from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Set

from .exceptions import CycleDetectedError
from .model import GraphSnapshot
from .models import NodeRole


@dataclass(frozen=True)
class GraphIssue:
    """One pre-flight finding"""
    code: str
    message: str
    node_ids: tuple = ()


def topological_order(snapshot: GraphSnapshot) -> List[str]:
    """
    Perform topological sort using Kahn's algorithm.

    Returns list of node IDs in topological order.

    Raises CycleDetectedError if the graph has a directed cycle.
    """
    graph: Dict[str, List[str]] = {node.id: [] for node in snapshot.nodes}
    in_degree: Dict[str, int] = {node.id: 0 for node in snapshot.nodes}

    for edge in snapshot.edges:
        graph[edge.source_node_id].append(edge.target_node_id)
        in_degree[edge.target_node_id] += 1

    queue = deque([node_id for node_id, degree in in_degree.items() if degree == 0])
    order = []

    while queue:
        node_id = queue.popleft()
        order.append(node_id)

        for neighbor in graph[node_id]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    if len(order) != len(snapshot.nodes):
        raise CycleDetectedError(set(graph) - set(order))

    return order


def _connected_components(snapshot: GraphSnapshot) -> List[Set[str]]:
    undirected: Dict[str, Set[str]] = {node.id: set() for node in snapshot.nodes}
    for edge in snapshot.edges:
        undirected[edge.source_node_id].add(edge.target_node_id)
        undirected[edge.target_node_id].add(edge.source_node_id)

    components = []
    visited: Set[str] = set()
    for start in undirected:
        if start in visited:
            continue
        component = set()
        queue = deque([start])
        while queue:
            node_id = queue.popleft()
            if node_id in component:
                continue
            component.add(node_id)
            queue.extend(undirected[node_id] - component)
        visited |= component
        components.append(component)

    return components


def validate_for_execution(snapshot: GraphSnapshot) -> List[GraphIssue]:
    """
    Collect advisory findings about a graph before it is sent for execution.

    Never raises; an empty list means nothing suspicious was found.
    """
    if not snapshot.nodes:
        return [GraphIssue("empty", "Pipeline has no nodes")]

    issues = []
    roles = {node.role for node in snapshot.nodes}

    if NodeRole.SOURCE not in roles:
        issues.append(GraphIssue("no_source", "Pipeline has no SOURCE node"))
    if NodeRole.TARGET not in roles:
        issues.append(GraphIssue("no_target", "Pipeline has no TARGET node"))

    try:
        topological_order(snapshot)
    except CycleDetectedError as e:
        issues.append(GraphIssue("cycle", e.message, tuple(e.node_ids)))

    components = _connected_components(snapshot)
    if len(components) > 1:
        main = max(components, key=len)
        stray = sorted(set().union(*components) - main)
        issues.append(GraphIssue(
            "disconnected",
            f"Disconnected graph detected - nodes not connected: {stray}",
            tuple(stray),
        ))

    return issues
