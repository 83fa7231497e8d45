"""flowform - branching assessment flows: editing, migration, layout and routing."""

from flowform.adapters.sinks import FileSink, FlowSink, ListSink, flush
from flowform.editor.history import TemporalHistory
from flowform.editor.state import FlowEditor
from flowform.graph.layout import find_smart_position, tidy_layout
from flowform.graph.reconcile import migrate_flow_data, reconcile
from flowform.models.flow import (
    AssessmentStatus,
    ConditionType,
    EdgeCondition,
    FlowData,
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeKind,
    QuestionType,
)
from flowform.routing.conditions import evaluate_condition
from flowform.routing.session import RespondentSession
from flowform.routing.traversal import find_next_node

__all__ = [
    # Graph values
    "AssessmentStatus",
    "ConditionType",
    "EdgeCondition",
    "FlowData",
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "NodeKind",
    "QuestionType",
    # Routing
    "evaluate_condition",
    "find_next_node",
    "RespondentSession",
    # Migration and layout
    "migrate_flow_data",
    "reconcile",
    "find_smart_position",
    "tidy_layout",
    # Editing
    "FlowEditor",
    "TemporalHistory",
    # Persistence
    "FlowSink",
    "ListSink",
    "FileSink",
    "flush",
]
