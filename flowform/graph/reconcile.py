"""Migration of legacy option-handle branching to condition-based edges.

Older flows branched single-choice questions through per-option output
handles: an edge's ``source_handle`` held the id of the option it stood for.
The canonical representation instead gives that edge an ``equals`` condition
on the option's text. ``reconcile`` rewrites the former into the latter and
is idempotent; ``migrate_flow_data`` runs it once and stamps the schema
version so already-migrated flows skip the scan.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from flowform.models.flow import (
    ConditionType,
    EdgeCondition,
    FlowData,
    FlowEdge,
    FlowNode,
    QuestionNodeData,
)

logger = logging.getLogger(__name__)

# 1: per-option source handles, 2: condition-based edges
CURRENT_SCHEMA_VERSION = 2


@dataclass
class ReconcileResult:
    """Normalized flow: edges carry their condition inline and in the map."""

    nodes: list[FlowNode]
    edges: list[FlowEdge]
    condition_map: dict[str, EdgeCondition | None] = field(default_factory=dict)


def _migrate_handle(edge: FlowEdge, source: FlowNode | None) -> FlowEdge:
    """Turn a handle edge into a conditional edge and drop its handle."""
    option = None
    if source is not None and isinstance(source.data, QuestionNodeData):
        option = next(
            (o for o in source.data.options or [] if o.id == edge.source_handle),
            None,
        )

    if option is None:
        logger.warning(
            "edge %s references unknown option %r on node %s; dropping handle",
            edge.id,
            edge.source_handle,
            edge.source,
        )
        return edge.model_copy(update={"source_handle": None})

    if edge.condition is not None:
        # an explicit condition already describes this branch
        return edge.model_copy(update={"source_handle": None})

    condition = EdgeCondition(
        type=ConditionType.equals,
        value=option.text,
        option_id=option.id,
    )
    return edge.model_copy(update={"source_handle": None, "condition": condition})


def _dedupe_pairs(edges: list[FlowEdge]) -> list[FlowEdge]:
    """Keep one edge per (source, target), preferring the conditional one."""
    chosen: dict[tuple[str, str], FlowEdge] = {}
    for edge in edges:
        pair = (edge.source, edge.target)
        current = chosen.get(pair)
        if current is None or (current.condition is None and edge.condition is not None):
            chosen[pair] = edge
    kept = {id(e) for e in chosen.values()}
    return [e for e in edges if id(e) in kept]


def reconcile(nodes: Sequence[FlowNode], edges: Sequence[FlowEdge]) -> ReconcileResult:
    """Normalize a loaded flow to the condition-based edge representation.

    Running it on its own output changes nothing: every ``source_handle`` is
    already None and the branching flags are already cleared.
    """
    nodes_by_id = {n.id: n for n in nodes}

    migrated: list[FlowEdge] = []
    handle_count = 0
    for edge in edges:
        if edge.source_handle is not None:
            edge = _migrate_handle(edge, nodes_by_id.get(edge.source))
            handle_count += 1
        migrated.append(edge)

    deduped = _dedupe_pairs(migrated)
    if len(deduped) != len(migrated):
        logger.debug("dropped %d duplicate edges", len(migrated) - len(deduped))

    new_nodes = []
    for node in nodes:
        if isinstance(node.data, QuestionNodeData) and node.data.enable_branching is not None:
            data = node.data.model_copy(update={"enable_branching": None})
            node = node.model_copy(update={"data": data})
        new_nodes.append(node)

    if handle_count:
        logger.debug("migrated %d legacy handle edges", handle_count)

    condition_map = {e.id: e.condition for e in deduped if e.condition is not None}
    return ReconcileResult(nodes=new_nodes, edges=deduped, condition_map=condition_map)


def migrate_flow_data(data: FlowData | Mapping) -> FlowData:
    """Bring persisted flow data up to ``CURRENT_SCHEMA_VERSION``.

    Flows already stamped with the current version are returned as-is.
    """
    flow = data if isinstance(data, FlowData) else FlowData.model_validate(data)
    if flow.schema_version is not None and flow.schema_version >= CURRENT_SCHEMA_VERSION:
        return flow

    result = reconcile(flow.nodes, flow.edges)
    logger.info(
        "migrated flow from schema %s to %s (%d nodes, %d edges)",
        flow.schema_version,
        CURRENT_SCHEMA_VERSION,
        len(result.nodes),
        len(result.edges),
    )
    return FlowData(
        nodes=result.nodes,
        edges=result.edges,
        schema_version=CURRENT_SCHEMA_VERSION,
    )
