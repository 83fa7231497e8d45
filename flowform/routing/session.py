"""Respondent session: walks a flow one answer at a time.

The same class drives the author's preview (built from the editor's live
snapshot) and the live respondent runtime (built from persisted flow data),
and both delegate every routing decision to ``find_next_node``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field

from flowform.models.flow import (
    Answer,
    EdgeCondition,
    FlowData,
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeKind,
    QuestionNodeData,
)
from flowform.routing.piping import resolve_answer_pipes
from flowform.routing.scoring import ScoreResult, calculate_score
from flowform.routing.traversal import FallbackPolicy, find_next_node
from flowform.utils.identifiers import utc_timestamp

logger = logging.getLogger(__name__)


class SessionState(BaseModel):
    """Resumable progress of one respondent (what the browser keeps locally)."""

    current_node_id: str | None = None
    answers: dict[str, Answer] = Field(default_factory=dict)
    history: list[str] = Field(default_factory=list)
    started_at: str = Field(default_factory=utc_timestamp)


class RespondentSession:
    """Step-by-step traversal of a flow for a single respondent.

    Usage:
        session = RespondentSession.from_flow_data(flow)
        session.start()
        session.answer("Yes")
        session.next()
    """

    def __init__(
        self,
        nodes: Sequence[FlowNode],
        edges: Sequence[FlowEdge],
        condition_map: Mapping[str, EdgeCondition | None] | None = None,
        *,
        allow_back_navigation: bool = True,
        fallback: FallbackPolicy = "first_edge",
        state: SessionState | None = None,
    ) -> None:
        self.nodes = list(nodes)
        self.edges = list(edges)
        self.condition_map = dict(condition_map) if condition_map is not None else None
        self.allow_back_navigation = allow_back_navigation
        self.fallback = fallback
        self._state = state.model_copy(deep=True) if state is not None else SessionState()

    @classmethod
    def from_flow_data(cls, flow: FlowData | Mapping, **kwargs) -> RespondentSession:
        """Live runtime: conditions are read from the persisted edges."""
        flow = flow if isinstance(flow, FlowData) else FlowData.model_validate(flow)
        return cls(flow.nodes, flow.edges, None, **kwargs)

    @classmethod
    def from_graph(cls, graph: FlowGraph, **kwargs) -> RespondentSession:
        """Preview: conditions come from the editor's condition map."""
        return cls(graph.nodes, graph.edges, graph.conditions, **kwargs)

    def _node(self, node_id: str | None) -> FlowNode | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def _next_from(self, node_id: str, answer: Answer | None = None) -> FlowNode | None:
        return find_next_node(
            self.nodes,
            self.edges,
            self.condition_map,
            node_id,
            answer,
            fallback=self.fallback,
        )

    @property
    def start_node(self) -> FlowNode | None:
        return next((n for n in self.nodes if n.kind == NodeKind.start), None)

    @property
    def current_node(self) -> FlowNode | None:
        """The node on screen; the start node until the session is started."""
        if self._state.current_node_id is None:
            return self.start_node
        return self._node(self._state.current_node_id)

    @property
    def answers(self) -> dict[str, Answer]:
        return dict(self._state.answers)

    @property
    def history(self) -> list[str]:
        return list(self._state.history)

    @property
    def is_complete(self) -> bool:
        node = self.current_node
        return node is not None and node.kind == NodeKind.end

    @property
    def progress(self) -> int:
        """Percentage of question nodes answered so far."""
        questions = [n for n in self.nodes if n.kind == NodeKind.question]
        if not questions:
            return 0
        answered = sum(1 for n in questions if n.id in self._state.answers)
        return round(answered / len(questions) * 100)

    @property
    def question_text(self) -> str | None:
        """Current question with earlier answers piped in."""
        node = self.current_node
        if node is None or not isinstance(node.data, QuestionNodeData):
            return None
        return resolve_answer_pipes(node.data.question_text, self._state.answers)

    @property
    def can_advance(self) -> bool:
        """False while a required question on screen has no answer."""
        node = self.current_node
        if node is None or not isinstance(node.data, QuestionNodeData):
            return node is not None
        if not node.data.required:
            return True
        answer = self._state.answers.get(node.id)
        return answer is not None and answer != "" and answer != []

    def start(self) -> FlowNode | None:
        """Leave the start screen. Returns the first node shown, or None."""
        start = self.start_node
        if start is None:
            logger.warning("flow has no start node")
            return None
        following = self._next_from(start.id)
        if following is not None:
            self._state.history = [start.id]
            self._state.current_node_id = following.id
        return following

    def answer(self, value: Answer) -> bool:
        """Record an answer for the question on screen."""
        node = self.current_node
        if node is None or node.kind != NodeKind.question:
            return False
        self._state.answers[node.id] = value
        return True

    def next(self) -> FlowNode | None:
        """Route to the next node using the recorded answer, if any."""
        node = self.current_node
        if node is None or self.is_complete:
            return None
        if node.kind == NodeKind.start and self._state.current_node_id is None:
            return self.start()
        if not self.can_advance:
            return None

        following = self._next_from(node.id, self._state.answers.get(node.id))
        if following is not None:
            self._state.history.append(node.id)
            self._state.current_node_id = following.id
        return following

    def back(self) -> FlowNode | None:
        """Return to the previous node; answers given so far are kept."""
        if not self.allow_back_navigation or not self._state.history:
            return None
        previous = self._state.history.pop()
        self._state.current_node_id = previous
        return self._node(previous)

    def score(self) -> ScoreResult | None:
        """Score of a finished session, or None while it is still running."""
        if not self.is_complete:
            return None
        return calculate_score(self._state.answers, self.nodes)

    def to_state(self) -> SessionState:
        return self._state.model_copy(deep=True)

    def __repr__(self) -> str:
        return (
            f"RespondentSession(current={self._state.current_node_id!r}, "
            f"answers={len(self._state.answers)}, complete={self.is_complete})"
        )
