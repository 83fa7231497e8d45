"""Tests for respondent sessions."""

import pytest

from flowform.editor.state import FlowEditor
from flowform.models.flow import FlowData, QuestionType
from flowform.routing.session import RespondentSession


@pytest.fixture
def linear_session(linear_flow):
    nodes, edges = linear_flow
    return RespondentSession.from_flow_data(FlowData(nodes=nodes, edges=edges))


class TestWalk:
    """Stepping through a flow."""

    def test_starts_on_start_screen(self, linear_session):
        """A new session shows the start node."""
        assert linear_session.current_node.id == "start"
        assert linear_session.history == []
        assert linear_session.progress == 0

    def test_linear_walk(self, linear_session):
        """Answering every question reaches the end."""
        assert linear_session.next().id == "q1"
        assert linear_session.answer("Ada") is True
        assert linear_session.next().id == "q2"
        linear_session.answer(4)
        assert linear_session.next().id == "end"

        assert linear_session.is_complete
        assert linear_session.progress == 100
        assert linear_session.history == ["start", "q1", "q2"]
        assert linear_session.next() is None

    def test_required_question_blocks(self, linear_session):
        """A required question can't be skipped or left blank."""
        linear_session.start()
        assert linear_session.can_advance is False
        assert linear_session.next() is None

        linear_session.answer("")
        assert linear_session.next() is None

    def test_answer_outside_question(self, linear_session):
        """Only questions take answers."""
        assert linear_session.answer("x") is False

    def test_branching(self, branching_flow):
        """The answer picks the branch."""
        nodes, edges = branching_flow
        session = RespondentSession.from_flow_data(FlowData(nodes=nodes, edges=edges))
        session.start()
        session.answer("B")
        assert session.next().id == "endB"

    def test_dead_end_policy(self, branching_flow):
        """An unmatched answer stays put under the dead-end policy."""
        nodes, edges = branching_flow
        session = RespondentSession(nodes, edges, fallback="dead_end")
        session.start()
        session.answer("C")
        assert session.next() is None
        assert session.current_node.id == "q"


class TestBackNavigation:
    """Going back keeps earlier answers."""

    def test_back(self, linear_session):
        """Going back keeps the answer and can move forward again."""
        linear_session.start()
        linear_session.answer("Ada")
        linear_session.next()

        assert linear_session.back().id == "q1"
        assert linear_session.answers == {"q1": "Ada"}
        assert linear_session.next().id == "q2"

    def test_back_to_start_and_forward(self, linear_session):
        """Back from the first question returns to the start screen."""
        linear_session.start()
        assert linear_session.back().id == "start"
        assert linear_session.next().id == "q1"

    def test_back_disabled(self, linear_flow):
        """Back does nothing when disabled."""
        nodes, edges = linear_flow
        session = RespondentSession(nodes, edges, allow_back_navigation=False)
        session.start()
        assert session.back() is None
        assert session.current_node.id == "q1"


class TestPreviewAndResume:
    """Preview from the editor and resumable state."""

    def test_preview_uses_condition_map(self):
        """A preview routes with the editor's conditions."""
        editor = FlowEditor()
        start = editor.add_node("start", (0, 0))
        question = editor.add_question_node(QuestionType.yes_no, (400, 0))
        yes_end = editor.add_node("end", (800, 0))
        no_end = editor.add_node("end", (800, 300))
        editor.connect(start.id, question.id)
        editor.connect(question.id, yes_end.id)
        editor.connect(question.id, no_end.id)

        session = RespondentSession.from_graph(editor.snapshot())
        assert session.start().id == question.id
        session.answer("No")
        assert session.next().id == no_end.id

    def test_resume_from_state(self, linear_session, linear_flow):
        """A saved state resumes where it left off."""
        linear_session.start()
        linear_session.answer("Ada")
        linear_session.next()
        state = linear_session.to_state()

        nodes, edges = linear_flow
        resumed = RespondentSession(nodes, edges, state=state)
        assert resumed.current_node.id == "q2"
        assert resumed.answers == {"q1": "Ada"}
        assert resumed.history == ["start", "q1"]

    def test_piped_question_text(self, linear_session):
        """Earlier answers are piped into the question."""
        linear_session.start()
        linear_session.answer("Ada")
        linear_session.next()
        assert linear_session.question_text == "How was it, Ada?"


class TestScore:
    """Score is available once the session completes."""

    def test_score(self, linear_flow):
        """The score is only available at the end."""
        nodes, edges = linear_flow
        q1 = nodes[1]
        scored = q1.model_copy(update={
            "data": q1.data.model_copy(update={"points": 3, "correct_answer": "Ada"}),
        })
        nodes = [nodes[0], scored, *nodes[2:]]
        session = RespondentSession(nodes, edges)

        session.start()
        session.answer("Ada")
        session.next()
        assert session.score() is None
        session.answer(5)
        session.next()

        result = session.score()
        assert (result.score, result.max_score) == (3, 3)
