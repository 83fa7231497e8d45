"""Next-node resolution over a flow snapshot.

``find_next_node`` is the one routing implementation. The canvas preview, the
respondent runtime and saved-then-reloaded flows all call it, so what an
author previews is exactly what a respondent gets.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Literal

from flowform.models.flow import Answer, EdgeCondition, FlowEdge, FlowNode, QuestionNodeData
from flowform.routing.conditions import evaluate_condition, to_comparison_string

logger = logging.getLogger(__name__)

FallbackPolicy = Literal["first_edge", "dead_end"]


def resolve_condition(
    edge: FlowEdge,
    condition_map: Mapping[str, EdgeCondition | None] | None,
) -> EdgeCondition | None:
    """The condition in effect for ``edge``.

    An entry in ``condition_map`` (even an explicit None) wins; persisted
    flows without a map fall back to the condition embedded on the edge.
    """
    if condition_map is not None and edge.id in condition_map:
        return condition_map[edge.id]
    return edge.condition


def _target(nodes: Sequence[FlowNode], edge: FlowEdge) -> FlowNode | None:
    # a dangling target is a dead end, not an error
    return next((n for n in nodes if n.id == edge.target), None)


def _match_legacy_handle(
    nodes: Sequence[FlowNode],
    outgoing: list[FlowEdge],
    from_id: str,
    answer: Answer,
) -> FlowEdge | None:
    source = next((n for n in nodes if n.id == from_id), None)
    if source is None or not isinstance(source.data, QuestionNodeData):
        return None
    answer_text = to_comparison_string(answer)
    option = next((o for o in source.data.options or [] if o.text == answer_text), None)
    if option is None:
        return None
    return next((e for e in outgoing if e.source_handle == option.id), None)


def find_next_node(
    nodes: Sequence[FlowNode],
    edges: Sequence[FlowEdge],
    condition_map: Mapping[str, EdgeCondition | None] | None,
    from_id: str,
    answer: Answer | None = None,
    *,
    fallback: FallbackPolicy = "first_edge",
) -> FlowNode | None:
    """Resolve the node a respondent moves to after ``from_id``.

    Resolution order:
      1. no outgoing edges -> None (terminal node)
      2. a single unconditional edge -> its target
      3. first conditional edge (in edge order) whose condition matches the answer
      4. legacy per-option ``source_handle`` edge matching the answer's option
      5. first edge with neither a condition nor a handle (the default branch)
      6. ``fallback="first_edge"``: the first outgoing edge; ``"dead_end"``: None

    Never raises on malformed graphs; unreachable targets resolve to None.
    """
    outgoing = [e for e in edges if e.source == from_id]
    if not outgoing:
        return None

    conditions = [resolve_condition(e, condition_map) for e in outgoing]

    if len(outgoing) == 1 and conditions[0] is None:
        return _target(nodes, outgoing[0])

    if answer is not None:
        for edge, condition in zip(outgoing, conditions):
            if condition is not None and evaluate_condition(condition, answer):
                return _target(nodes, edge)

        if any(e.source_handle is not None for e in outgoing):
            legacy_edge = _match_legacy_handle(nodes, outgoing, from_id, answer)
            if legacy_edge is not None:
                return _target(nodes, legacy_edge)

    for edge, condition in zip(outgoing, conditions):
        if condition is None and edge.source_handle is None:
            return _target(nodes, edge)

    if fallback == "dead_end":
        logger.debug("no branch of %s matched answer %r; stopping", from_id, answer)
        return None

    logger.warning(
        "no branch of %s matched answer %r and no default edge exists; "
        "falling back to first edge %s",
        from_id,
        answer,
        outgoing[0].id,
    )
    return _target(nodes, outgoing[0])
