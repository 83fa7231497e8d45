"""Shared flow fixtures."""

import pytest

from flowform.models.flow import (
    EdgeCondition,
    EndNodeData,
    FlowEdge,
    FlowNode,
    NodeKind,
    Position,
    QuestionNodeData,
    QuestionOption,
    QuestionType,
    StartNodeData,
)
from flowform.utils.identifiers import edge_id_for


def _node(node_id: str, kind: NodeKind, data, x: float = 0, y: float = 0) -> FlowNode:
    return FlowNode(id=node_id, kind=kind, position=Position(x=x, y=y), data=data)


def _edge(
    source: str,
    target: str,
    condition: EdgeCondition | None = None,
    source_handle: str | None = None,
    edge_id: str | None = None,
) -> FlowEdge:
    return FlowEdge(
        id=edge_id or edge_id_for(source, target),
        source=source,
        target=target,
        condition=condition,
        source_handle=source_handle,
    )


@pytest.fixture
def make_node():
    return _node


@pytest.fixture
def make_edge():
    return _edge


@pytest.fixture
def linear_flow():
    """Start -> q1 (short text) -> q2 (rating) -> End, unconditional edges."""
    nodes = [
        _node("start", NodeKind.start, StartNodeData()),
        _node(
            "q1",
            NodeKind.question,
            QuestionNodeData(question_type=QuestionType.short_text, question_text="Your name?"),
            x=400,
        ),
        _node(
            "q2",
            NodeKind.question,
            QuestionNodeData(
                question_type=QuestionType.rating,
                question_text="How was it, {{q1:Your name}}?",
                min_value=1,
                max_value=5,
            ),
            x=800,
        ),
        _node("end", NodeKind.end, EndNodeData(), x=1200),
    ]
    edges = [_edge("start", "q1"), _edge("q1", "q2"), _edge("q2", "end")]
    return nodes, edges


@pytest.fixture
def branching_flow():
    """Start -> single-choice q (A/B) -> endA on "A", endB on "B"."""
    nodes = [
        _node("start", NodeKind.start, StartNodeData()),
        _node(
            "q",
            NodeKind.question,
            QuestionNodeData(
                question_type=QuestionType.multiple_choice_single,
                question_text="Pick one",
                options=[
                    QuestionOption(id="opt-a", text="A"),
                    QuestionOption(id="opt-b", text="B"),
                ],
            ),
            x=400,
        ),
        _node("endA", NodeKind.end, EndNodeData(title="A"), x=800),
        _node("endB", NodeKind.end, EndNodeData(title="B"), x=800, y=400),
    ]
    edges = [
        _edge("start", "q"),
        _edge("q", "endA", EdgeCondition(type="equals", value="A")),
        _edge("q", "endB", EdgeCondition(type="equals", value="B")),
    ]
    return nodes, edges


@pytest.fixture
def legacy_yes_no_flow():
    """Yes/no question branching through per-option handles, random edge ids."""
    nodes = [
        _node("start", NodeKind.start, StartNodeData()),
        _node(
            "q",
            NodeKind.question,
            QuestionNodeData(
                question_type=QuestionType.yes_no,
                question_text="Continue?",
                enable_branching=True,
                options=[
                    QuestionOption(id="opt-yes", text="Yes"),
                    QuestionOption(id="opt-no", text="No"),
                ],
            ),
            x=400,
        ),
        _node("endYes", NodeKind.end, EndNodeData(title="Yes"), x=800),
        _node("endNo", NodeKind.end, EndNodeData(title="No"), x=800, y=400),
    ]
    edges = [
        _edge("start", "q", edge_id="reactflow__edge-1"),
        _edge("q", "endYes", source_handle="opt-yes", edge_id="reactflow__edge-2"),
        _edge("q", "endNo", source_handle="opt-no", edge_id="reactflow__edge-3"),
    ]
    return nodes, edges
