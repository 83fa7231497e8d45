"""Flow graph models: nodes, edges, conditions and the persisted flow shape.

For the data models we use pydantic. Python attributes are snake_case; the
persisted/wire shape uses the camelCase keys the canvas has always written
(``questionType``, ``sourceHandle``, ``buttonText`` ...). Both spellings are
accepted on input.
"""

from enum import Enum
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from flowform.utils.identifiers import edge_id_for, generate_node_id, generate_option_id


class FlowModel(BaseModel):
    """Base for all flow values: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class NodeKind(str, Enum):
    """Kinds of node that can appear on the canvas."""

    start = "start"
    question = "question"
    end = "end"


class QuestionType(str, Enum):
    """Question widgets a question node can render."""

    multiple_choice_single = "multiple_choice_single"
    multiple_choice_multi = "multiple_choice_multi"
    yes_no = "yes_no"
    rating = "rating"
    nps = "nps"
    short_text = "short_text"
    long_text = "long_text"
    number = "number"
    email = "email"
    dropdown = "dropdown"
    date = "date"


# question types whose options can each drive their own outgoing branch
OPTION_BRANCHING_TYPES = frozenset({
    QuestionType.yes_no,
    QuestionType.multiple_choice_single,
    QuestionType.dropdown,
})

OPTION_TYPES = OPTION_BRANCHING_TYPES | {QuestionType.multiple_choice_multi}


class ConditionType(str, Enum):
    """Comparisons an edge condition can apply to an answer."""

    equals = "equals"
    not_equals = "not_equals"
    contains = "contains"
    greater_than = "greater_than"
    less_than = "less_than"


class MatchMode(str, Enum):
    """How multi-select answers are matched (kept for the editor panel)."""

    any = "any"
    all = "all"
    exactly = "exactly"


class AssessmentStatus(str, Enum):
    """Lifecycle of an assessment. Only drafts may be structurally edited."""

    draft = "draft"
    published = "published"
    closed = "closed"


Scalar = Union[str, int, float]
Answer = Union[str, list[str], int, float]


class Position(FlowModel):
    """Canvas coordinates of a node's top-left corner."""

    x: float = 0
    y: float = 0


class QuestionOption(FlowModel):
    """A selectable option of a choice question."""

    id: str
    text: str
    points: int | float | None = None


class NodeData(FlowModel):
    """Common base for node payloads. Unknown keys survive a round-trip."""

    model_config = ConfigDict(extra="allow")


class StartNodeData(NodeData):
    title: str = "Welcome"
    description: str | None = "Thank you for taking this assessment."
    button_text: str = "Start"


class QuestionNodeData(NodeData):
    question_type: QuestionType = QuestionType.multiple_choice_single
    question_text: str = "Your question here"
    description: str | None = None
    required: bool = True

    options: list[QuestionOption] | None = None

    # deprecated: per-option output handles; cleared by reconciliation
    enable_branching: bool | None = None

    # rating / nps / number
    min_value: int | float | None = None
    max_value: int | float | None = None
    min_label: str | None = None
    max_label: str | None = None

    # text inputs
    placeholder: str | None = None
    max_length: int | None = None

    # multi-select constraints
    min_selections: int | None = None
    max_selections: int | None = None

    # scoring
    points: int | float | None = None
    correct_answer: str | list[str] | None = None


class EndNodeData(NodeData):
    title: str = "Thank You!"
    description: str | None = "Your response has been recorded."
    show_score: bool = False
    redirect_url: str | None = None


NODE_DATA_CLASSES: dict[NodeKind, type[NodeData]] = {
    NodeKind.start: StartNodeData,
    NodeKind.question: QuestionNodeData,
    NodeKind.end: EndNodeData,
}


class FlowNode(FlowModel):
    """A step of the assessment placed on the canvas."""

    id: str
    kind: NodeKind = Field(validation_alias=AliasChoices("kind", "type"))
    position: Position = Position()
    data: Union[StartNodeData, QuestionNodeData, EndNodeData]

    @model_validator(mode="before")
    @classmethod
    def _select_data_class(cls, values: Any) -> Any:
        """Parse ``data`` with the payload class matching ``kind``."""
        if not isinstance(values, dict):
            return values
        kind = values.get("kind", values.get("type"))
        data = values.get("data")
        if data is None:
            data = {}
        if isinstance(data, dict):
            try:
                data_cls = NODE_DATA_CLASSES[NodeKind(kind)]
            except (KeyError, ValueError):
                return values  # field validation reports the bad kind
            values = {**values, "data": data_cls.model_validate(data)}
        return values


class EdgeCondition(FlowModel):
    """Predicate gating an edge. A list ``value`` means any element may match."""

    type: ConditionType | str = Field(union_mode="left_to_right")
    value: Scalar | list[Scalar]
    option_id: str | None = None
    option_ids: list[str] | None = None
    match_mode: MatchMode | None = None


class FlowEdge(FlowModel):
    """A directed connection between two nodes."""

    id: str
    source: str
    target: str
    source_handle: str | None = None  # legacy per-option handle
    condition: EdgeCondition | None = None


EdgeConditionMap = dict[str, EdgeCondition | None]


class FlowGraph(FlowModel):
    """Immutable value of the editable graph.

    Edges are pure topology here; their conditions live only in
    ``conditions`` keyed by edge id. The value carries no selection or drag
    state, so it doubles as the undo/redo snapshot.
    """

    nodes: tuple[FlowNode, ...] = ()
    edges: tuple[FlowEdge, ...] = ()
    conditions: dict[str, EdgeCondition | None] = Field(default_factory=dict)

    def node(self, node_id: str) -> FlowNode | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def edge(self, edge_id: str) -> FlowEdge | None:
        return next((e for e in self.edges if e.id == edge_id), None)

    def outgoing(self, node_id: str) -> list[FlowEdge]:
        return [e for e in self.edges if e.source == node_id]

    def condition_for(self, edge_id: str) -> EdgeCondition | None:
        return self.conditions.get(edge_id)


class FlowData(FlowModel):
    """The canonical persisted shape: edges carry their condition inline."""

    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)
    schema_version: int | None = None


# ===========================================
# Type guards
# ===========================================


def is_start_node_data(data: NodeData) -> bool:
    return isinstance(data, StartNodeData)


def is_question_node_data(data: NodeData) -> bool:
    return isinstance(data, QuestionNodeData)


def is_end_node_data(data: NodeData) -> bool:
    return isinstance(data, EndNodeData)


# ===========================================
# Factory functions
# ===========================================


def as_position(position: Position | dict | tuple | None) -> Position:
    """Accept a Position, a ``{"x", "y"}`` mapping or an ``(x, y)`` pair."""
    if position is None:
        return Position()
    if isinstance(position, Position):
        return position
    if isinstance(position, dict):
        return Position.model_validate(position)
    x, y = position
    return Position(x=x, y=y)


def create_start_node(position: Position | dict | tuple | None = None) -> FlowNode:
    return FlowNode(
        id=generate_node_id(NodeKind.start.value),
        kind=NodeKind.start,
        position=as_position(position),
        data=StartNodeData(),
    )


def _default_options(question_type: QuestionType) -> list[QuestionOption] | None:
    if question_type in (QuestionType.multiple_choice_single, QuestionType.multiple_choice_multi):
        labels = [(1, "Option 1"), (2, "Option 2")]
    elif question_type == QuestionType.yes_no:
        labels = [("yes", "Yes"), ("no", "No")]
    elif question_type == QuestionType.dropdown:
        labels = [(1, "Option 1"), (2, "Option 2"), (3, "Option 3")]
    else:
        return None
    return [QuestionOption(id=generate_option_id(suffix), text=text) for suffix, text in labels]


def create_question_node(
    position: Position | dict | tuple | None = None,
    question_type: QuestionType | str = QuestionType.multiple_choice_single,
) -> FlowNode:
    """Create a question node with the defaults of its question type."""
    question_type = QuestionType(question_type)
    fields: dict[str, Any] = {"question_type": question_type}

    options = _default_options(question_type)
    if options is not None:
        fields["options"] = options

    if question_type == QuestionType.rating:
        fields.update(min_value=1, max_value=5, min_label="Poor", max_label="Excellent")
    elif question_type == QuestionType.nps:
        fields.update(min_value=0, max_value=10, min_label="Not likely", max_label="Very likely")
    elif question_type == QuestionType.short_text:
        fields.update(placeholder="Enter your answer...", max_length=100)
    elif question_type == QuestionType.long_text:
        fields.update(placeholder="Enter your answer...", max_length=1000)
    elif question_type == QuestionType.number:
        fields.update(placeholder="Enter a number...")
    elif question_type == QuestionType.email:
        fields.update(placeholder="you@example.com")
    elif question_type == QuestionType.date:
        fields.update(placeholder="Select a date...")

    return FlowNode(
        id=generate_node_id(NodeKind.question.value),
        kind=NodeKind.question,
        position=as_position(position),
        data=QuestionNodeData(**fields),
    )


def create_end_node(position: Position | dict | tuple | None = None) -> FlowNode:
    return FlowNode(
        id=generate_node_id(NodeKind.end.value),
        kind=NodeKind.end,
        position=as_position(position),
        data=EndNodeData(),
    )


def create_node(
    kind: NodeKind | str,
    position: Position | dict | tuple | None = None,
    question_type: QuestionType | str | None = None,
) -> FlowNode:
    """Create a node of ``kind`` with type-appropriate default data."""
    kind = NodeKind(kind)
    if kind == NodeKind.start:
        return create_start_node(position)
    if kind == NodeKind.end:
        return create_end_node(position)
    return create_question_node(position, question_type or QuestionType.multiple_choice_single)


def create_edge(
    source: str,
    target: str,
    condition: EdgeCondition | None = None,
    source_handle: str | None = None,
) -> FlowEdge:
    return FlowEdge(
        id=edge_id_for(source, target),
        source=source,
        target=target,
        source_handle=source_handle,
        condition=condition,
    )
