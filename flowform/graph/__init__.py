"""Structural graph operations, legacy migration and layout."""

from flowform.graph.layout import (
    DEFAULT_LAYOUT,
    LayoutParams,
    boxes_overlap,
    find_smart_position,
    tidy_layout,
)
from flowform.graph.operations import (
    add_node,
    connect,
    delete_edge,
    delete_node,
    duplicates_sibling,
    flow_data_from_graph,
    graph_from_flow_data,
    has_default_edge,
    is_at_option_limit,
    move_node,
    next_option_condition,
    set_edge_condition,
    uncovered_options,
    update_node_data,
)
from flowform.graph.reachability import (
    ConnectedBranch,
    get_connected_branch,
    get_downstream_nodes,
    get_upstream_nodes,
)
from flowform.graph.reconcile import (
    CURRENT_SCHEMA_VERSION,
    ReconcileResult,
    migrate_flow_data,
    reconcile,
)

__all__ = [
    # Structural operations
    "add_node",
    "connect",
    "delete_edge",
    "delete_node",
    "move_node",
    "set_edge_condition",
    "update_node_data",
    "duplicates_sibling",
    "has_default_edge",
    "is_at_option_limit",
    "next_option_condition",
    "uncovered_options",
    "flow_data_from_graph",
    "graph_from_flow_data",
    # Migration
    "CURRENT_SCHEMA_VERSION",
    "ReconcileResult",
    "migrate_flow_data",
    "reconcile",
    # Layout
    "DEFAULT_LAYOUT",
    "LayoutParams",
    "boxes_overlap",
    "find_smart_position",
    "tidy_layout",
    # Reachability
    "ConnectedBranch",
    "get_connected_branch",
    "get_downstream_nodes",
    "get_upstream_nodes",
]
