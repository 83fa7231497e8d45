"""Graph walks used for branch highlighting on the canvas."""

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from flowform.models.flow import FlowEdge


@dataclass
class ConnectedBranch:
    """Node and edge ids that belong to a highlighted branch."""

    node_ids: list[str] = field(default_factory=list)
    edge_ids: list[str] = field(default_factory=list)


def _walk(start: str, edges: Sequence[FlowEdge], forward: bool) -> list[str]:
    visited = {start}
    order = [start]
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for edge in edges:
            here, there = (edge.source, edge.target) if forward else (edge.target, edge.source)
            if here == current and there not in visited:
                visited.add(there)
                order.append(there)
                queue.append(there)
    return order


def get_downstream_nodes(node_id: str, edges: Sequence[FlowEdge]) -> list[str]:
    """All node ids reachable from ``node_id`` following edge direction (inclusive)."""
    return _walk(node_id, edges, forward=True)


def get_upstream_nodes(node_id: str, edges: Sequence[FlowEdge]) -> list[str]:
    """All node ids that can reach ``node_id`` (inclusive)."""
    return _walk(node_id, edges, forward=False)


def get_connected_branch(
    node_id: str,
    edges: Sequence[FlowEdge],
    mode: Literal["full", "downstream", "upstream"] = "full",
) -> ConnectedBranch:
    if mode == "downstream":
        node_ids = get_downstream_nodes(node_id, edges)
    elif mode == "upstream":
        node_ids = get_upstream_nodes(node_id, edges)
    else:
        node_ids = list(dict.fromkeys(
            get_downstream_nodes(node_id, edges) + get_upstream_nodes(node_id, edges)
        ))

    members = set(node_ids)
    edge_ids = [e.id for e in edges if e.source in members and e.target in members]
    return ConnectedBranch(node_ids=node_ids, edge_ids=edge_ids)
