"""Canvas layout helpers.

- tidy_layout: gentle cleanup that keeps the author's arrangement but pulls
  overlapping nodes apart and snaps everything to the grid
- find_smart_position: where to drop a single new node without re-laying
  out the rest of the canvas

Both are deterministic: the same nodes, in the same order, with the same
parameters always land on the same coordinates.
"""

import functools
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from flowform import config
from flowform.models.flow import FlowNode, Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutParams:
    """Node footprint and spacing shared by layout and placement."""

    node_width: float = config.NODE_WIDTH
    node_height: float = config.NODE_HEIGHT
    min_gap_x: float = config.MIN_GAP_X
    min_gap_y: float = config.MIN_GAP_Y
    grid_size: float = config.GRID_SIZE
    direction: Literal["LR", "TB"] = "LR"


DEFAULT_LAYOUT = LayoutParams()


def boxes_overlap(a: Position, b: Position, params: LayoutParams) -> bool:
    """True if two node boxes come closer than the minimum gaps."""
    span_x = params.node_width + params.min_gap_x
    span_y = params.node_height + params.min_gap_y
    return abs(a.x - b.x) < span_x and abs(a.y - b.y) < span_y


def snap_to_grid(value: float, grid_size: float) -> float:
    # round half up so results match the canvas' own snapping
    return math.floor(value / grid_size + 0.5) * grid_size


def _snap_up(value: float, grid_size: float) -> float:
    return math.ceil(value / grid_size) * grid_size


@dataclass
class _Slot:
    x: float
    y: float

    @property
    def position(self) -> Position:
        return Position(x=self.x, y=self.y)


def _reading_order(slots: list[_Slot], params: LayoutParams) -> list[int]:
    """Indices sorted left-to-right (LR) or top-to-bottom (TB), row-tolerant."""

    def compare(a: int, b: int) -> float:
        pa, pb = slots[a], slots[b]
        if params.direction == "TB":
            dy = pa.y - pb.y
            if abs(dy) > params.node_height / 2:
                return dy
            return pa.x - pb.x
        dx = pa.x - pb.x
        if abs(dx) > params.node_width / 2:
            return dx
        return pa.y - pb.y

    return sorted(range(len(slots)), key=functools.cmp_to_key(compare))


def tidy_layout(
    nodes: Sequence[FlowNode],
    params: LayoutParams = DEFAULT_LAYOUT,
) -> list[FlowNode]:
    """Resolve overlaps and snap node positions to the grid.

    The algorithm:
    1. walks nodes in reading order, pushing each one clear of every node
       already placed (right first for LR, down first for TB)
    2. snaps all positions to the grid
    3. re-checks in the same order and pushes remaining collisions along the
       main axis in whole grid steps until nothing overlaps

    Node identity, data and order are preserved; edges are not involved.
    """
    if not nodes:
        return []

    span_x = params.node_width + params.min_gap_x
    span_y = params.node_height + params.min_gap_y
    is_tb = params.direction == "TB"

    slots = [_Slot(n.position.x, n.position.y) for n in nodes]
    order = _reading_order(slots, params)

    for i in range(1, len(order)):
        current = slots[order[i]]
        for j in range(i):
            prev = slots[order[j]]
            if not boxes_overlap(prev.position, current.position, params):
                continue
            overlap_x = prev.x + span_x - current.x
            overlap_y = prev.y + span_y - current.y
            if is_tb:
                if 0 < overlap_y <= overlap_x:
                    current.y = prev.y + span_y
                elif overlap_x > 0:
                    current.x = prev.x + span_x
            else:
                if 0 < overlap_x <= overlap_y:
                    current.x = prev.x + span_x
                elif overlap_y > 0:
                    current.y = prev.y + span_y

    for slot in slots:
        slot.x = snap_to_grid(slot.x, params.grid_size)
        slot.y = snap_to_grid(slot.y, params.grid_size)

    # snapping can reintroduce overlaps; each push moves strictly forward,
    # so every earlier node forces at most one push
    for i in range(1, len(order)):
        current = slots[order[i]]
        pushed = True
        while pushed:
            pushed = False
            for j in range(i):
                prev = slots[order[j]]
                if boxes_overlap(prev.position, current.position, params):
                    if is_tb:
                        current.y = _snap_up(prev.y + span_y, params.grid_size)
                    else:
                        current.x = _snap_up(prev.x + span_x, params.grid_size)
                    pushed = True

    return [
        node.model_copy(update={"position": slot.position})
        for node, slot in zip(nodes, slots)
    ]


def find_smart_position(
    nodes: Sequence[FlowNode],
    selected_node_id: str | None = None,
    params: LayoutParams = DEFAULT_LAYOUT,
    max_attempts: int = config.PLACEMENT_ATTEMPTS,
) -> Position:
    """Pick a drop position for a new node.

    Below the selected node if there is one, otherwise below the whole graph
    and horizontally centred. Collisions shift the proposal down one row at a
    time; after ``max_attempts`` candidates the last one is used regardless.
    """
    if not nodes:
        return Position(x=0, y=0)

    row = params.node_height + params.min_gap_y
    selected = next((n for n in nodes if n.id == selected_node_id), None)
    if selected is not None:
        # stay in the selected node's column, even off-grid
        x = selected.position.x
        y = selected.position.y + row
    else:
        left = min(n.position.x for n in nodes)
        right = max(n.position.x for n in nodes) + params.node_width
        bottom = max(n.position.y for n in nodes) + params.node_height
        x = snap_to_grid((left + right) / 2 - params.node_width / 2, params.grid_size)
        y = bottom + params.min_gap_y

    candidate = Position(x=x, y=snap_to_grid(y, params.grid_size))
    for attempt in range(max_attempts):
        if not any(boxes_overlap(candidate, n.position, params) for n in nodes):
            return candidate
        if attempt < max_attempts - 1:
            candidate = Position(x=candidate.x, y=candidate.y + row)

    logger.warning(
        "no free slot after %d attempts; placing node at (%s, %s)",
        max_attempts,
        candidate.x,
        candidate.y,
    )
    return candidate
