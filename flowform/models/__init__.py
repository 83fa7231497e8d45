"""Core data models for flowform."""

from flowform.models.flow import (
    OPTION_BRANCHING_TYPES,
    OPTION_TYPES,
    Answer,
    AssessmentStatus,
    ConditionType,
    EdgeCondition,
    EdgeConditionMap,
    EndNodeData,
    FlowData,
    FlowEdge,
    FlowGraph,
    FlowNode,
    MatchMode,
    NodeKind,
    Position,
    QuestionNodeData,
    QuestionOption,
    QuestionType,
    StartNodeData,
    create_edge,
    create_end_node,
    create_node,
    create_question_node,
    create_start_node,
    is_end_node_data,
    is_question_node_data,
    is_start_node_data,
)

__all__ = [
    # Enums and constants
    "AssessmentStatus",
    "ConditionType",
    "MatchMode",
    "NodeKind",
    "QuestionType",
    "OPTION_BRANCHING_TYPES",
    "OPTION_TYPES",
    # Graph values
    "Answer",
    "EdgeCondition",
    "EdgeConditionMap",
    "EndNodeData",
    "FlowData",
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "Position",
    "QuestionNodeData",
    "QuestionOption",
    "StartNodeData",
    # Factories and guards
    "create_edge",
    "create_end_node",
    "create_node",
    "create_question_node",
    "create_start_node",
    "is_end_node_data",
    "is_question_node_data",
    "is_start_node_data",
]
