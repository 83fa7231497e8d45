"""Answer piping: quoting earlier answers inside question text.

Storage format is ``{{node_id:label}}`` where ``node_id`` is the question
whose answer is quoted and ``label`` a short human-readable excerpt of its
text, shown in the editor as ``@label``.
"""

import re
from collections import deque
from collections.abc import Collection, Mapping, Sequence

from flowform.models.flow import Answer, FlowEdge, FlowNode, NodeKind

PIPE_PATTERN = re.compile(r"\{\{([^:}]+):([^}]+)\}\}")


def resolve_answer_pipes(
    text: str,
    answers: Mapping[str, Answer],
    fallback: str = "...",
) -> str:
    """Replace pipe tokens with the quoted answers (respondent and preview)."""

    def substitute(match: re.Match) -> str:
        answer = answers.get(match.group(1))
        if answer is None or answer == "" or answer == []:
            return fallback
        if isinstance(answer, list):
            return ", ".join(str(a) for a in answer)
        return str(answer)

    return PIPE_PATTERN.sub(substitute, text)


def get_display_text(text: str) -> str:
    """``"You said {{q-1:Favorite Color}}"`` -> ``"You said @Favorite Color"``."""
    return PIPE_PATTERN.sub(lambda m: f"@{m.group(2)}", text)


def has_pipe_references(text: str) -> bool:
    return PIPE_PATTERN.search(text) is not None


def find_broken_pipe_references(text: str, existing_node_ids: Collection[str]) -> list[str]:
    """Node ids referenced by pipes that no longer exist in the flow."""
    return [m.group(1) for m in PIPE_PATTERN.finditer(text) if m.group(1) not in existing_node_ids]


def build_pipe_token(node_id: str, label: str) -> str:
    return f"{{{{{node_id}:{label}}}}}"


def get_ancestor_question_nodes(
    current_node_id: str,
    nodes: Sequence[FlowNode],
    edges: Sequence[FlowEdge],
) -> list[FlowNode]:
    """Question nodes that can come before ``current_node_id``, nearest first."""
    by_id = {n.id: n for n in nodes}
    visited: set[str] = set()
    queue = deque([current_node_id])
    ancestors: list[FlowNode] = []
    while queue:
        node_id = queue.popleft()
        for edge in edges:
            if edge.target != node_id or edge.source in visited:
                continue
            visited.add(edge.source)
            queue.append(edge.source)
            source = by_id.get(edge.source)
            if source is not None and source.kind == NodeKind.question:
                ancestors.append(source)
    return ancestors
