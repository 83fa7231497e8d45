"""Flow sinks: where the editor's flow data is saved to and loaded from."""

import logging
from pathlib import Path

from flowform.editor.state import FlowEditor
from flowform.models.flow import FlowData

logger = logging.getLogger(__name__)


class FlowSink:
    """Protocol for persisting flow data."""

    def save(self, flow: FlowData) -> None:
        """Persist a flow."""
        raise NotImplementedError

    def load(self) -> FlowData | None:
        """Return the last persisted flow, or None if nothing was saved."""
        raise NotImplementedError


class ListSink(FlowSink):
    """Keeps every saved flow in memory."""

    def __init__(self) -> None:
        self.saved: list[FlowData] = []

    def save(self, flow: FlowData) -> None:
        self.saved.append(flow)

    def load(self) -> FlowData | None:
        return self.saved[-1] if self.saved else None

    def clear(self) -> None:
        """Forget all saved flows."""
        self.saved.clear()


class FileSink(FlowSink):
    """Writes the flow to a JSON file in its camelCase wire format."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def save(self, flow: FlowData) -> None:
        self.path.write_text(flow.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

    def load(self) -> FlowData | None:
        if not self.path.exists():
            return None
        return FlowData.model_validate_json(self.path.read_text(encoding="utf-8"))


def flush(editor: FlowEditor, sink: FlowSink) -> bool:
    """Save the editor's flow if it has unsaved changes.

    Mirrors one autosave tick: nothing happens while the document is clean or
    a save is already in flight. A failing sink leaves the document dirty and
    the error propagates to the caller.

    Returns:
        True if the flow was saved.
    """
    if not editor.is_dirty or editor.is_saving:
        return False

    editor.set_saving(True)
    try:
        sink.save(editor.get_flow_data())
        editor.mark_saved()
    finally:
        editor.set_saving(False)
    logger.debug("flushed flow %s to %s", editor.assessment_id, type(sink).__name__)
    return True
