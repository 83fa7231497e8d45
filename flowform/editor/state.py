"""Editing state of the flow canvas.

``FlowEditor`` owns the live graph of one assessment together with the UI
state around it (selection, panel, drag) and the save-orchestration flags the
autosave collaborator polls. Every graph change goes through ``_commit``,
which hands the outgoing graph value to the undo history first.

Structural mutations are ignored while the flow is locked (any status other
than draft). They report the rejection through their return value (None or
False) and a debug log line, and leave the document and its dirty flag
untouched. Selection, panel, drag and dimension bookkeeping stay available.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from flowform.editor.history import TemporalHistory
from flowform.graph import operations as ops
from flowform.graph.layout import DEFAULT_LAYOUT, LayoutParams, find_smart_position, tidy_layout
from flowform.graph.reconcile import CURRENT_SCHEMA_VERSION, migrate_flow_data
from flowform.models.flow import (
    AssessmentStatus,
    EdgeCondition,
    FlowData,
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeKind,
    Position,
    QuestionType,
)
from flowform.utils.identifiers import utc_timestamp

logger = logging.getLogger(__name__)


class FlowEditor:
    """Mutable, lock-aware document wrapping an immutable FlowGraph.

    Usage:
        editor = FlowEditor()
        editor.load_flow(saved_flow)
        node = editor.add_question_node("yes_no")
        editor.undo()
        sink.save(editor.get_flow_data())
    """

    def __init__(
        self,
        history: TemporalHistory | None = None,
        layout: LayoutParams = DEFAULT_LAYOUT,
    ) -> None:
        self.history = history if history is not None else TemporalHistory()
        self.layout = layout
        self._reset_state()

    def _reset_state(self) -> None:
        self._graph = FlowGraph()

        # assessment
        self.assessment_id: str | None = None
        self.title = ""
        self.description: str | None = None
        self.status = AssessmentStatus.draft

        # ui
        self.selected_node_id: str | None = None
        self.is_panel_open = False
        self.newly_added_node_id: str | None = None
        self.dragging_node_id: str | None = None
        self._dimensions: dict[str, tuple[float, float]] = {}

        # persistence
        self.is_dirty = False
        self.is_saving = False
        self.last_saved_at: str | None = None

    # ------------------------------------------------------------------
    # read access
    # ------------------------------------------------------------------

    @property
    def graph(self) -> FlowGraph:
        return self._graph

    @property
    def nodes(self) -> tuple[FlowNode, ...]:
        return self._graph.nodes

    @property
    def edges(self) -> tuple[FlowEdge, ...]:
        return self._graph.edges

    @property
    def condition_map(self) -> dict[str, EdgeCondition | None]:
        return dict(self._graph.conditions)

    @property
    def is_flow_locked(self) -> bool:
        return self.status != AssessmentStatus.draft

    @property
    def selected_node(self) -> FlowNode | None:
        return self._graph.node(self.selected_node_id) if self.selected_node_id else None

    @property
    def dimensions(self) -> dict[str, tuple[float, float]]:
        """Measured (width, height) per node as reported by the canvas."""
        return dict(self._dimensions)

    def snapshot(self) -> FlowGraph:
        """The current graph value, without any UI state."""
        return self._graph

    def get_edge_condition(self, edge_id: str) -> EdgeCondition | None:
        return self._graph.condition_for(edge_id)

    def get_flow_data(self) -> FlowData:
        """Canonical persisted shape, conditions folded back onto edges."""
        return ops.flow_data_from_graph(self._graph, CURRENT_SCHEMA_VERSION)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _commit(self, graph: FlowGraph, *, coalesce: bool = False) -> bool:
        if graph == self._graph:
            return False
        self.history.capture(self._graph, coalesce=coalesce)
        self._graph = graph
        self.is_dirty = True
        return True

    def _rejected(self, action: str) -> bool:
        if not self.is_flow_locked:
            return False
        logger.debug("ignoring %s: flow is %s", action, self.status.value)
        return True

    def _prune_ui_state(self) -> None:
        """Drop references to nodes that no longer exist."""
        if self.selected_node_id and self._graph.node(self.selected_node_id) is None:
            self.selected_node_id = None
            self.is_panel_open = False
        if self.newly_added_node_id and self._graph.node(self.newly_added_node_id) is None:
            self.newly_added_node_id = None
        if self.dragging_node_id and self._graph.node(self.dragging_node_id) is None:
            self.dragging_node_id = None

    # ------------------------------------------------------------------
    # assessment and loading
    # ------------------------------------------------------------------

    def set_assessment(self, assessment_id: str, title: str, description: str | None = None) -> None:
        self.assessment_id = assessment_id
        self.title = title
        self.description = description

    def update_title(self, title: str) -> None:
        self.title = title
        self.is_dirty = True

    def update_description(self, description: str | None) -> None:
        self.description = description
        self.is_dirty = True

    def set_status(self, status: AssessmentStatus | str) -> None:
        self.status = AssessmentStatus(status)

    def load_flow(
        self,
        flow: FlowData | Mapping | Sequence[FlowNode],
        edges: Sequence[FlowEdge] | None = None,
    ) -> None:
        """Replace the document with persisted data.

        Accepts FlowData (or its dict form), or ``nodes, edges``. Legacy data
        is migrated on the way in; history is cleared so the loaded document
        can't be undone into an empty canvas.
        """
        if edges is not None:
            flow = FlowData(nodes=list(flow), edges=list(edges))
        flow = migrate_flow_data(flow)

        self._graph = ops.graph_from_flow_data(flow)
        self.is_dirty = False
        self._dimensions.clear()
        self._prune_ui_state()
        self.history.clear()
        logger.info(
            "loaded flow %s (%d nodes, %d edges)",
            self.assessment_id,
            len(self._graph.nodes),
            len(self._graph.edges),
        )

    # ------------------------------------------------------------------
    # structural mutations (gated by the lock)
    # ------------------------------------------------------------------

    def add_node(
        self,
        kind: NodeKind | str,
        position: Position | dict | tuple | None = None,
        question_type: QuestionType | str | None = None,
    ) -> FlowNode | None:
        """Add a node and select it. Without a position, a free slot is picked."""
        if self._rejected("add_node"):
            return None
        if position is None:
            position = find_smart_position(self._graph.nodes, self.selected_node_id, self.layout)

        graph, node = ops.add_node(self._graph, kind, position, question_type)
        self._commit(graph)
        self.selected_node_id = node.id
        self.is_panel_open = True
        self.newly_added_node_id = node.id
        return node

    def add_question_node(
        self,
        question_type: QuestionType | str,
        position: Position | dict | tuple | None = None,
    ) -> FlowNode | None:
        if self._rejected("add_question_node"):
            return None
        return self.add_node(NodeKind.question, position, question_type)

    def delete_node(self, node_id: str) -> bool:
        if self._rejected("delete_node"):
            return False
        changed = self._commit(ops.delete_node(self._graph, node_id))
        if changed:
            self._dimensions.pop(node_id, None)
            self._prune_ui_state()
        return changed

    def update_node_data(self, node_id: str, partial: Mapping[str, Any]) -> bool:
        if self._rejected("update_node_data"):
            return False
        return self._commit(ops.update_node_data(self._graph, node_id, partial))

    def connect(
        self,
        source: str,
        target: str,
        condition: EdgeCondition | Mapping | None = None,
    ) -> FlowEdge | None:
        """Connect two nodes.

        Without an explicit condition, an option-branching question gets a
        condition for its next uncovered option. Once every option has a
        branch, one default edge may still be added; after that the
        connection is refused. An explicit condition already used by a
        sibling edge is refused as well.
        """
        if self._rejected("connect"):
            return None
        if isinstance(condition, Mapping):
            condition = EdgeCondition.model_validate(condition)

        existing = next(
            (e for e in self._graph.outgoing(source) if e.target == target),
            None,
        )
        replacing = existing.id if existing is not None else None

        if condition is not None:
            if ops.duplicates_sibling(self._graph, source, condition, replacing):
                logger.debug("ignoring connect from %s: duplicate sibling condition", source)
                return None
        elif ops.is_option_branching(self._graph.node(source)):
            if ops.is_at_option_limit(self._graph, source, replacing):
                if ops.has_default_edge(self._graph, source, replacing):
                    logger.debug("ignoring connect from %s: options and default all branch", source)
                    return None
            else:
                condition = ops.next_option_condition(self._graph, source, replacing)

        graph, edge = ops.connect(self._graph, source, target, condition)
        self._commit(graph)
        return edge

    def delete_edge(self, edge_id: str) -> bool:
        if self._rejected("delete_edge"):
            return False
        return self._commit(ops.delete_edge(self._graph, edge_id))

    def update_edge_condition(self, edge_id: str, condition: EdgeCondition | Mapping | None) -> bool:
        if self._rejected("update_edge_condition"):
            return False
        if isinstance(condition, Mapping):
            condition = EdgeCondition.model_validate(condition)
        edge = self._graph.edge(edge_id)
        if edge is not None and ops.duplicates_sibling(self._graph, edge.source, condition, edge_id):
            logger.debug("ignoring condition on %s: it duplicates a sibling edge", edge_id)
            return False
        return self._commit(ops.set_edge_condition(self._graph, edge_id, condition))

    def auto_layout(self) -> bool:
        """Tidy every node position (see ``tidy_layout``)."""
        if self._rejected("auto_layout"):
            return False
        tidied = tidy_layout(self._graph.nodes, self.layout)
        return self._commit(ops.replace_positions(self._graph, tidied))

    # ------------------------------------------------------------------
    # non-structural changes (always allowed)
    # ------------------------------------------------------------------

    def select_node(self, node_id: str | None) -> None:
        self.selected_node_id = node_id
        self.is_panel_open = node_id is not None

    def open_panel(self) -> None:
        self.is_panel_open = True

    def close_panel(self) -> None:
        self.is_panel_open = False
        self.selected_node_id = None

    def clear_newly_added_node(self) -> None:
        self.newly_added_node_id = None

    def begin_drag(self, node_id: str) -> None:
        self.dragging_node_id = node_id

    def move_node(self, node_id: str, position: Position | dict | tuple) -> bool:
        """Live position update; a run of moves forms a single undo step."""
        return self._commit(ops.move_node(self._graph, node_id, position), coalesce=True)

    def end_drag(self) -> None:
        self.dragging_node_id = None
        self.history.end_burst()

    def set_node_dimensions(self, node_id: str, width: float, height: float) -> None:
        self._dimensions[node_id] = (width, height)

    # ------------------------------------------------------------------
    # save orchestration hooks
    # ------------------------------------------------------------------

    def mark_dirty(self) -> None:
        self.is_dirty = True

    def mark_saved(self) -> None:
        self.is_dirty = False
        self.last_saved_at = utc_timestamp()

    def set_saving(self, saving: bool) -> None:
        self.is_saving = saving

    # ------------------------------------------------------------------
    # history
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        if self._rejected("undo"):
            return False
        restored = self.history.undo(self._graph)
        if restored is None:
            return False
        self._graph = restored
        self.is_dirty = True  # re-trigger autosave
        self._prune_ui_state()
        return True

    def redo(self) -> bool:
        if self._rejected("redo"):
            return False
        restored = self.history.redo(self._graph)
        if restored is None:
            return False
        self._graph = restored
        self.is_dirty = True
        self._prune_ui_state()
        return True

    def clear_history(self) -> None:
        self.history.clear()

    def reset(self) -> None:
        """Back to an empty, unlocked, clean document with no history."""
        self._reset_state()
        self.history.clear()
        logger.info("editor reset")

    def __repr__(self) -> str:
        return (
            f"FlowEditor(assessment_id={self.assessment_id!r}, status={self.status.value}, "
            f"nodes={len(self._graph.nodes)}, edges={len(self._graph.edges)}, dirty={self.is_dirty})"
        )
