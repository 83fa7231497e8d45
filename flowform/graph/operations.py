"""Structural operations over an immutable FlowGraph.

Every function returns a new graph and leaves its input untouched. They
assume, but do not check, that referenced ids exist: an unknown id simply
leaves the graph unchanged. Well-formedness checks belong to the validator
that runs before publish.
"""

from collections.abc import Mapping
from typing import Any

from pydantic.alias_generators import to_camel

from flowform.models.flow import (
    OPTION_BRANCHING_TYPES,
    ConditionType,
    EdgeCondition,
    FlowData,
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeData,
    NodeKind,
    Position,
    QuestionNodeData,
    QuestionOption,
    QuestionType,
    as_position,
    create_edge,
    create_node,
)


def add_node(
    graph: FlowGraph,
    kind: NodeKind | str,
    position: Position | dict | tuple | None = None,
    question_type: QuestionType | str | None = None,
) -> tuple[FlowGraph, FlowNode]:
    """Append a new node with default data for its kind."""
    node = create_node(kind, position, question_type)
    return insert_node(graph, node), node


def insert_node(graph: FlowGraph, node: FlowNode) -> FlowGraph:
    return graph.model_copy(update={"nodes": (*graph.nodes, node)})


def delete_node(graph: FlowGraph, node_id: str) -> FlowGraph:
    """Remove a node together with every edge touching it."""
    if graph.node(node_id) is None:
        return graph
    removed = {e.id for e in graph.edges if e.source == node_id or e.target == node_id}
    return graph.model_copy(update={
        "nodes": tuple(n for n in graph.nodes if n.id != node_id),
        "edges": tuple(e for e in graph.edges if e.id not in removed),
        "conditions": {k: v for k, v in graph.conditions.items() if k not in removed},
    })


def merge_node_data(data: NodeData, partial: Mapping[str, Any]) -> NodeData:
    """Shallow-merge ``partial`` into ``data``.

    Keys may use either the python or the camelCase spelling; fields not
    named in ``partial`` keep their current value.
    """
    data_cls = type(data)
    field_names = {to_camel(name): name for name in data_cls.model_fields}
    normalized = {field_names.get(key, key): value for key, value in partial.items()}
    return data_cls.model_validate({**data.model_dump(), **normalized})


def update_node_data(graph: FlowGraph, node_id: str, partial: Mapping[str, Any]) -> FlowGraph:
    nodes = []
    changed = False
    for node in graph.nodes:
        if node.id == node_id:
            node = node.model_copy(update={"data": merge_node_data(node.data, partial)})
            changed = True
        nodes.append(node)
    if not changed:
        return graph
    return graph.model_copy(update={"nodes": tuple(nodes)})


def move_node(graph: FlowGraph, node_id: str, position: Position | dict | tuple) -> FlowGraph:
    position = as_position(position)
    nodes = tuple(
        n.model_copy(update={"position": position}) if n.id == node_id else n
        for n in graph.nodes
    )
    return graph.model_copy(update={"nodes": nodes})


def replace_positions(graph: FlowGraph, positioned: list[FlowNode]) -> FlowGraph:
    """Take positions from ``positioned`` (matched by id), keep everything else."""
    positions = {n.id: n.position for n in positioned}
    nodes = tuple(
        n.model_copy(update={"position": positions[n.id]}) if n.id in positions else n
        for n in graph.nodes
    )
    return graph.model_copy(update={"nodes": nodes})


def connect(
    graph: FlowGraph,
    source: str,
    target: str,
    condition: EdgeCondition | None = None,
) -> tuple[FlowGraph, FlowEdge]:
    """Connect ``source`` to ``target``.

    The edge id is derived from the pair, so reconnecting the same pair
    replaces the existing edge (keeping its place in edge order) instead of
    adding a second one. Edges loaded with older random ids are matched by
    their endpoints and take over the derived id.
    """
    edge = create_edge(source, target)
    existing = next(
        (e for e in graph.edges if e.source == source and e.target == target),
        None,
    )
    conditions = dict(graph.conditions)
    if existing is not None:
        edges = tuple(edge if e.id == existing.id else e for e in graph.edges)
        conditions.pop(existing.id, None)
    else:
        edges = (*graph.edges, edge)

    if condition is not None:
        conditions[edge.id] = condition
    else:
        conditions.pop(edge.id, None)
    return graph.model_copy(update={"edges": edges, "conditions": conditions}), edge


def delete_edge(graph: FlowGraph, edge_id: str) -> FlowGraph:
    if graph.edge(edge_id) is None:
        return graph
    return graph.model_copy(update={
        "edges": tuple(e for e in graph.edges if e.id != edge_id),
        "conditions": {k: v for k, v in graph.conditions.items() if k != edge_id},
    })


def set_edge_condition(
    graph: FlowGraph,
    edge_id: str,
    condition: EdgeCondition | None,
) -> FlowGraph:
    if graph.edge(edge_id) is None:
        return graph
    conditions = dict(graph.conditions)
    if condition is None:
        conditions.pop(edge_id, None)
    else:
        conditions[edge_id] = condition
    return graph.model_copy(update={"conditions": conditions})


# ===========================================
# Option coverage
# ===========================================


def is_option_branching(node: FlowNode | None) -> bool:
    return (
        node is not None
        and isinstance(node.data, QuestionNodeData)
        and node.data.question_type in OPTION_BRANCHING_TYPES
    )


def covered_option_ids(
    graph: FlowGraph,
    node_id: str,
    exclude_edge_id: str | None = None,
) -> set[str]:
    """Ids of options that already have an outgoing conditional edge."""
    node = graph.node(node_id)
    if node is None or not isinstance(node.data, QuestionNodeData):
        return set()
    options = node.data.options or []
    by_text = {o.text: o.id for o in options}

    covered: set[str] = set()
    for edge in graph.outgoing(node_id):
        if edge.id == exclude_edge_id:
            continue
        condition = graph.condition_for(edge.id)
        if condition is None:
            continue
        if condition.option_id is not None:
            covered.add(condition.option_id)
        elif condition.type == ConditionType.equals and isinstance(condition.value, str):
            option_id = by_text.get(condition.value)
            if option_id is not None:
                covered.add(option_id)
    return covered


def uncovered_options(
    graph: FlowGraph,
    node_id: str,
    exclude_edge_id: str | None = None,
) -> list[QuestionOption]:
    node = graph.node(node_id)
    if node is None or not isinstance(node.data, QuestionNodeData):
        return []
    covered = covered_option_ids(graph, node_id, exclude_edge_id)
    return [o for o in node.data.options or [] if o.id not in covered]


def is_at_option_limit(
    graph: FlowGraph,
    node_id: str,
    exclude_edge_id: str | None = None,
) -> bool:
    """True once every option of an option-branching question has its own edge."""
    node = graph.node(node_id)
    if not is_option_branching(node) or not node.data.options:
        return False
    return not uncovered_options(graph, node_id, exclude_edge_id)


def next_option_condition(
    graph: FlowGraph,
    node_id: str,
    exclude_edge_id: str | None = None,
) -> EdgeCondition | None:
    """Condition for the first option without a branch, or None if there is none."""
    if not is_option_branching(graph.node(node_id)):
        return None
    remaining = uncovered_options(graph, node_id, exclude_edge_id)
    if not remaining:
        return None
    option = remaining[0]
    return EdgeCondition(type=ConditionType.equals, value=option.text, option_id=option.id)


def has_default_edge(graph: FlowGraph, node_id: str, exclude_edge_id: str | None = None) -> bool:
    """True if ``node_id`` already has an outgoing edge without a condition."""
    return any(
        graph.condition_for(e.id) is None
        for e in graph.outgoing(node_id)
        if e.id != exclude_edge_id
    )


def _same_branch(a: EdgeCondition, b: EdgeCondition) -> bool:
    if a.option_id and b.option_id:
        return a.option_id == b.option_id
    if a.option_ids and b.option_ids:
        return sorted(a.option_ids) == sorted(b.option_ids)
    return a.type == b.type and a.value == b.value


def duplicates_sibling(
    graph: FlowGraph,
    node_id: str,
    condition: EdgeCondition | None,
    exclude_edge_id: str | None = None,
) -> bool:
    """True if another outgoing edge of ``node_id`` already covers ``condition``.

    Two default edges count as duplicates. Conditions match on their option
    id, else on their set of option ids, else on type and value.
    """
    for edge in graph.outgoing(node_id):
        if edge.id == exclude_edge_id:
            continue
        sibling = graph.condition_for(edge.id)
        if condition is None and sibling is None:
            return True
        if condition is None or sibling is None:
            continue
        if _same_branch(condition, sibling):
            return True
    return False


# ===========================================
# Persisted shape
# ===========================================


def graph_from_flow_data(flow: FlowData) -> FlowGraph:
    """Split persisted edges into topology plus the authoritative condition map."""
    return FlowGraph(
        nodes=tuple(flow.nodes),
        edges=tuple(e.model_copy(update={"condition": None}) for e in flow.edges),
        conditions={e.id: e.condition for e in flow.edges if e.condition is not None},
    )


def flow_data_from_graph(graph: FlowGraph, schema_version: int | None = None) -> FlowData:
    """Fold the condition map back onto the edges."""
    return FlowData(
        nodes=list(graph.nodes),
        edges=[
            e.model_copy(update={"condition": graph.condition_for(e.id)})
            for e in graph.edges
        ],
        schema_version=schema_version,
    )
