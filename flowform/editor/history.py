"""Bounded undo/redo history of flow graph values.

The editor hands over its graph value right before replacing it. Because
FlowGraph is immutable and compares structurally, deduplication is a plain
equality check against the newest entry, and undo/redo just swap values.
"""

import logging
import time
from collections import deque
from collections.abc import Callable

from flowform import config
from flowform.models.flow import FlowGraph

logger = logging.getLogger(__name__)


class TemporalHistory:
    """Undo/redo stacks of past and future graph values.

    Continuous input (pointer drags) is captured with ``coalesce=True``: such
    captures are dropped while they keep arriving inside the rolling throttle
    window, so a whole drag produces a single entry holding the pre-drag
    graph. Any discrete capture, or ``end_burst()``, closes the burst.
    """

    def __init__(
        self,
        limit: int = config.HISTORY_LIMIT,
        throttle_ms: int = config.HISTORY_THROTTLE_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty history.

        Args:
            limit: maximum number of past entries; the oldest are evicted first.
            throttle_ms: rolling window for coalescing continuous captures.
            clock: monotonic time source in seconds (injectable for tests).
        """
        self.limit = limit
        self.throttle_ms = throttle_ms
        self._clock = clock
        self._past: deque[FlowGraph] = deque(maxlen=limit)
        self._future: list[FlowGraph] = []
        self._last_coalesced_at: float | None = None

    def _in_burst(self, now: float) -> bool:
        if self._last_coalesced_at is None:
            return False
        return (now - self._last_coalesced_at) * 1000 < self.throttle_ms

    def capture(self, previous: FlowGraph, *, coalesce: bool = False) -> bool:
        """Record ``previous`` as the state to return to on undo.

        Returns True if a new entry was pushed.
        """
        # a new edit invalidates anything that was undone
        self._future.clear()

        if coalesce:
            now = self._clock()
            in_burst = self._in_burst(now)
            self._last_coalesced_at = now
            if in_burst:
                logger.debug("history capture throttled")
                return False
        else:
            self._last_coalesced_at = None

        if self._past and self._past[-1] == previous:
            return False
        self._past.append(previous)
        return True

    def end_burst(self) -> None:
        """Close the current coalescing burst (e.g. when a drag ends)."""
        self._last_coalesced_at = None

    def undo(self, present: FlowGraph) -> FlowGraph | None:
        """Step back. Returns the graph to restore, or None if nothing to undo."""
        if not self._past:
            return None
        self._future.append(present)
        self._last_coalesced_at = None
        return self._past.pop()

    def redo(self, present: FlowGraph) -> FlowGraph | None:
        """Step forward again. Returns the graph to restore, or None."""
        if not self._future:
            return None
        self._past.append(present)
        self._last_coalesced_at = None
        return self._future.pop()

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
        self._last_coalesced_at = None

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def past_states(self) -> list[FlowGraph]:
        """Past entries, oldest first."""
        return list(self._past)

    @property
    def future_states(self) -> list[FlowGraph]:
        """Undone entries, next-to-redo last."""
        return list(self._future)

    def __len__(self) -> int:
        return len(self._past)

    def __repr__(self) -> str:
        return f"TemporalHistory(past={len(self._past)}, future={len(self._future)}, limit={self.limit})"
