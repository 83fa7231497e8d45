"""Routing: condition evaluation, traversal and respondent sessions."""

from flowform.routing.conditions import evaluate_condition
from flowform.routing.piping import (
    build_pipe_token,
    find_broken_pipe_references,
    get_ancestor_question_nodes,
    get_display_text,
    has_pipe_references,
    resolve_answer_pipes,
)
from flowform.routing.scoring import ScoreResult, calculate_score
from flowform.routing.session import RespondentSession, SessionState
from flowform.routing.traversal import find_next_node, resolve_condition

__all__ = [
    "evaluate_condition",
    "find_next_node",
    "resolve_condition",
    # Sessions
    "RespondentSession",
    "SessionState",
    # Scoring
    "ScoreResult",
    "calculate_score",
    # Answer piping
    "build_pipe_token",
    "find_broken_pipe_references",
    "get_ancestor_question_nodes",
    "get_display_text",
    "has_pipe_references",
    "resolve_answer_pipes",
]
