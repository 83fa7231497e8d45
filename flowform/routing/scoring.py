"""Quiz scoring for completed responses."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from flowform.models.flow import Answer, FlowNode, QuestionNodeData
from flowform.routing.conditions import to_comparison_string


@dataclass
class ScoreResult:
    score: float = 0
    max_score: float = 0


def _is_correct(answer: Answer, correct: str | list[str]) -> bool:
    if isinstance(correct, list):
        given = answer if isinstance(answer, list) else [answer]
        given = [to_comparison_string(a) for a in given]
        expected = [to_comparison_string(c) for c in correct]
        return len(given) == len(expected) and all(a in expected for a in given)
    return to_comparison_string(answer) == to_comparison_string(correct)


def calculate_score(answers: Mapping[str, Answer], nodes: Sequence[FlowNode]) -> ScoreResult:
    """Sum the points of correctly answered questions.

    Only answered questions that carry ``points`` count toward the maximum;
    a question without ``correct_answer`` adds to the maximum but can't score.
    """
    by_id = {n.id: n for n in nodes}
    result = ScoreResult()
    for node_id, answer in answers.items():
        node = by_id.get(node_id)
        if node is None or not isinstance(node.data, QuestionNodeData):
            continue
        points = node.data.points
        if not points:
            continue
        result.max_score += points
        correct = node.data.correct_answer
        if correct and _is_correct(answer, correct):
            result.score += points
    return result
