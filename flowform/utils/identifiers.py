"""ID generation and timestamp utilities."""

import itertools
import time
import uuid
from datetime import datetime, timezone

_node_counter = itertools.count(1)


def generate_node_id(kind: str) -> str:
    """Generate a node ID prefixed with its kind, e.g. ``question-1718000000000-3``."""
    return f"{kind}-{int(time.time() * 1000)}-{next(_node_counter)}"


def generate_option_id(suffix: str | int | None = None) -> str:
    """Generate an option ID (``opt-<hex>`` or ``opt-<hex>-<suffix>``)."""
    base = f"opt-{uuid.uuid4().hex[:8]}"
    return f"{base}-{suffix}" if suffix is not None else base


def edge_id_for(source: str, target: str) -> str:
    """Deterministic edge ID for an ordered (source, target) pair.

    Two edges between the same pair always collide on this ID, which is what
    keeps the graph at one edge per pair.
    """
    return f"edge-{source}-{target}"


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
