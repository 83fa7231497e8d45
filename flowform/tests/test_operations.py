"""Tests for structural graph operations."""

from flowform.graph import operations as ops
from flowform.models.flow import (
    EdgeCondition,
    EndNodeData,
    FlowData,
    FlowGraph,
    NodeKind,
    Position,
    QuestionNodeData,
    QuestionType,
)


def _make_graph(nodes, edges, conditions=None) -> FlowGraph:
    return FlowGraph(nodes=tuple(nodes), edges=tuple(edges), conditions=conditions or {})


def _branching_graph(branching_flow) -> FlowGraph:
    nodes, edges = branching_flow
    return ops.graph_from_flow_data(FlowData(nodes=nodes, edges=edges))


class TestNodes:
    """Adding, deleting, updating and moving nodes."""

    def test_add_node_leaves_input_untouched(self):
        """Adding returns a new graph and leaves the old one alone."""
        graph = FlowGraph()
        new_graph, node = ops.add_node(graph, NodeKind.question, (40, 60), QuestionType.email)

        assert graph.nodes == ()
        assert new_graph.nodes == (node,)
        assert node.position == Position(x=40, y=60)
        assert node.data.question_type == QuestionType.email

    def test_delete_node_cascades(self, branching_flow):
        """Deleting a node removes its edges and their conditions."""
        graph = _branching_graph(branching_flow)
        result = ops.delete_node(graph, "q")

        assert [n.id for n in result.nodes] == ["start", "endA", "endB"]
        assert result.edges == ()
        assert result.conditions == {}

    def test_delete_unknown_node(self, branching_flow):
        """Deleting an unknown node returns the same graph."""
        graph = _branching_graph(branching_flow)
        assert ops.delete_node(graph, "missing") is graph

    def test_update_node_data_merges(self, branching_flow):
        """Partial updates merge and accept camelCase keys."""
        graph = _branching_graph(branching_flow)
        result = ops.update_node_data(graph, "q", {"questionText": "Pick again", "required": False})
        data = result.node("q").data

        assert isinstance(data, QuestionNodeData)
        assert data.question_text == "Pick again"
        assert data.required is False
        assert [o.text for o in data.options] == ["A", "B"]
        assert graph.node("q").data.question_text == "Pick one"

    def test_update_options_from_dicts(self, branching_flow):
        """Options given as dicts are validated."""
        graph = _branching_graph(branching_flow)
        result = ops.update_node_data(graph, "q", {
            "options": [{"id": "opt-c", "text": "C", "points": 2}],
        })
        option = result.node("q").data.options[0]
        assert (option.id, option.text, option.points) == ("opt-c", "C", 2)

    def test_update_unknown_node(self, branching_flow):
        """Updating an unknown node returns the same graph."""
        graph = _branching_graph(branching_flow)
        assert ops.update_node_data(graph, "missing", {"title": "x"}) is graph

    def test_move_node(self, branching_flow):
        """Only the moved node changes position."""
        graph = _branching_graph(branching_flow)
        result = ops.move_node(graph, "endB", {"x": 10, "y": 20})
        assert result.node("endB").position == Position(x=10, y=20)
        assert result.node("endA").position == graph.node("endA").position


class TestEdges:
    """Connecting, disconnecting and conditions."""

    def test_connect_adds_deterministic_edge(self, make_node):
        """A new connection gets the pair-derived id."""
        graph = _make_graph([
            make_node("a", NodeKind.start, {}),
            make_node("b", NodeKind.end, {}),
        ], [])
        result, edge = ops.connect(graph, "a", "b")

        assert edge.id == "edge-a-b"
        assert result.edges == (edge,)
        assert result.conditions == {}

    def test_reconnect_replaces(self, branching_flow):
        """Reconnecting a pair replaces the edge in place."""
        graph = _branching_graph(branching_flow)
        condition = EdgeCondition(type="equals", value="Z")
        result, edge = ops.connect(graph, "q", "endA", condition)

        assert len(result.edges) == len(graph.edges)
        assert [e.id for e in result.edges] == [e.id for e in graph.edges]
        assert result.condition_for(edge.id) == condition

    def test_reconnect_without_condition_clears_it(self, branching_flow):
        """Reconnecting without a condition drops the old one."""
        graph = _branching_graph(branching_flow)
        result, edge = ops.connect(graph, "q", "endA")
        assert edge.id not in result.conditions

    def test_reconnect_adopts_derived_id(self, make_node, make_edge):
        """A legacy edge id is replaced by the derived one."""
        graph = _make_graph(
            [make_node("a", NodeKind.start, {}), make_node("b", NodeKind.end, {})],
            [make_edge("a", "b", edge_id="legacy-1")],
            {"legacy-1": EdgeCondition(type="equals", value="x")},
        )
        result, edge = ops.connect(graph, "a", "b")

        assert [e.id for e in result.edges] == ["edge-a-b"]
        assert "legacy-1" not in result.conditions

    def test_delete_edge_drops_condition(self, branching_flow):
        """Deleting an edge drops its condition."""
        graph = _branching_graph(branching_flow)
        result = ops.delete_edge(graph, "edge-q-endA")

        assert result.edge("edge-q-endA") is None
        assert "edge-q-endA" not in result.conditions
        assert ops.delete_edge(graph, "missing") is graph

    def test_set_edge_condition(self, branching_flow):
        """Conditions can be set and cleared; unknown edges are ignored."""
        graph = _branching_graph(branching_flow)
        condition = EdgeCondition(type="contains", value="x")

        updated = ops.set_edge_condition(graph, "edge-q-endA", condition)
        cleared = ops.set_edge_condition(updated, "edge-q-endA", None)

        assert updated.condition_for("edge-q-endA") == condition
        assert "edge-q-endA" not in cleared.conditions
        assert ops.set_edge_condition(graph, "missing", condition) is graph


class TestOptionCoverage:
    """Option-branching questions get one edge per option."""

    def test_fully_covered(self, branching_flow):
        """Every option branched means the limit is reached."""
        graph = _branching_graph(branching_flow)
        assert ops.covered_option_ids(graph, "q") == {"opt-a", "opt-b"}
        assert ops.is_at_option_limit(graph, "q") is True
        assert ops.next_option_condition(graph, "q") is None

    def test_excluding_an_edge_frees_its_option(self, branching_flow):
        """The edge being replaced doesn't count toward coverage."""
        graph = _branching_graph(branching_flow)
        assert ops.is_at_option_limit(graph, "q", exclude_edge_id="edge-q-endB") is False
        condition = ops.next_option_condition(graph, "q", exclude_edge_id="edge-q-endB")
        assert (condition.value, condition.option_id) == ("B", "opt-b")

    def test_next_option_condition(self, branching_flow):
        """The first uncovered option gets an equals condition."""
        graph = ops.delete_edge(_branching_graph(branching_flow), "edge-q-endA")
        condition = ops.next_option_condition(graph, "q")

        assert condition.type == "equals"
        assert condition.value == "A"
        assert condition.option_id == "opt-a"
        assert [o.id for o in ops.uncovered_options(graph, "q")] == ["opt-a"]

    def test_multi_select_never_at_limit(self, make_node):
        """Multi-select questions don't branch per option."""
        node = make_node(
            "m",
            NodeKind.question,
            QuestionNodeData(
                question_type=QuestionType.multiple_choice_multi,
                options=[{"id": "o1", "text": "One"}],
            ),
        )
        graph = _make_graph([node], [])
        assert ops.is_option_branching(node) is False
        assert ops.is_at_option_limit(graph, "m") is False
        assert ops.next_option_condition(graph, "m") is None


class TestPersistedShape:
    """Conversion between FlowData and FlowGraph."""

    def test_conditions_move_into_map(self, branching_flow):
        """Loading splits conditions off the edges."""
        nodes, edges = branching_flow
        graph = ops.graph_from_flow_data(FlowData(nodes=nodes, edges=edges))

        assert all(e.condition is None for e in graph.edges)
        assert graph.condition_for("edge-q-endA").value == "A"
        assert "edge-start-q" not in graph.conditions

    def test_round_trip(self, branching_flow):
        """Graph to FlowData and back is lossless."""
        nodes, edges = branching_flow
        flow = FlowData(nodes=nodes, edges=edges, schema_version=2)
        graph = ops.graph_from_flow_data(flow)
        assert ops.flow_data_from_graph(graph, schema_version=2) == flow


class TestSiblingConditions:
    """Duplicate detection among a node's outgoing conditions."""

    def test_same_option_id_is_duplicate(self, branching_flow):
        """Matching option ids collide even when the values differ."""
        graph = _branching_graph(branching_flow)
        graph = ops.set_edge_condition(
            graph, "edge-q-endA", EdgeCondition(type="equals", value="A", option_id="opt-a")
        )
        candidate = EdgeCondition(type="equals", value="renamed", option_id="opt-a")

        assert ops.duplicates_sibling(graph, "q", candidate, exclude_edge_id="edge-q-endB")
        assert not ops.duplicates_sibling(graph, "q", candidate, exclude_edge_id="edge-q-endA")

    def test_option_id_sets_ignore_order(self, make_node, make_edge):
        """Multi-option conditions collide on the same set of ids."""
        nodes = [
            make_node("q", NodeKind.question, QuestionNodeData()),
            make_node("e", NodeKind.end, EndNodeData()),
        ]
        graph = _make_graph(
            nodes,
            [make_edge("q", "e")],
            {"edge-q-e": EdgeCondition(type="equals", value="x", option_ids=["o1", "o2"])},
        )
        same = EdgeCondition(type="equals", value="y", option_ids=["o2", "o1"])
        other = EdgeCondition(type="equals", value="x", option_ids=["o1"])

        assert ops.duplicates_sibling(graph, "q", same)
        assert not ops.duplicates_sibling(graph, "q", other)

    def test_type_and_value(self, branching_flow):
        """Plain conditions collide on type and value."""
        graph = _branching_graph(branching_flow)
        assert ops.duplicates_sibling(graph, "q", EdgeCondition(type="equals", value="B"))
        assert not ops.duplicates_sibling(graph, "q", EdgeCondition(type="contains", value="B"))

    def test_two_defaults(self, branching_flow):
        """A second unconditional edge duplicates the first."""
        graph = _branching_graph(branching_flow)
        assert not ops.has_default_edge(graph, "q")
        assert not ops.duplicates_sibling(graph, "q", None)

        graph, _ = ops.connect(graph, "q", "start")
        assert ops.has_default_edge(graph, "q")
        assert ops.duplicates_sibling(graph, "q", None)
        assert not ops.has_default_edge(graph, "q", exclude_edge_id="edge-q-start")
