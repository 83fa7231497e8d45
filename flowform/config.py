"""Runtime configuration for the flow editor core.

Values come from environment variables (a local .env file is honoured) so the
canvas and the test-suite can tune layout and history without code changes.
"""

import os

from dotenv import load_dotenv

load_dotenv()  # load environment variables from .env file


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


# undo/redo
HISTORY_LIMIT = _env_int("FLOWFORM_HISTORY_LIMIT", 50)
HISTORY_THROTTLE_MS = _env_int("FLOWFORM_HISTORY_THROTTLE_MS", 500)

# node footprint and spacing used by layout and smart placement
NODE_WIDTH = _env_int("FLOWFORM_NODE_WIDTH", 280)
NODE_HEIGHT = _env_int("FLOWFORM_NODE_HEIGHT", 180)
MIN_GAP_X = _env_int("FLOWFORM_MIN_GAP_X", 40)
MIN_GAP_Y = _env_int("FLOWFORM_MIN_GAP_Y", 40)
GRID_SIZE = _env_int("FLOWFORM_GRID_SIZE", 20)
PLACEMENT_ATTEMPTS = _env_int("FLOWFORM_PLACEMENT_ATTEMPTS", 10)

if HISTORY_LIMIT < 1:
    raise ValueError("FLOWFORM_HISTORY_LIMIT must be at least 1")
if GRID_SIZE < 1:
    raise ValueError("FLOWFORM_GRID_SIZE must be at least 1")
