"""Editing state of the flow canvas and its undo history."""

from flowform.editor.history import TemporalHistory
from flowform.editor.state import FlowEditor

__all__ = [
    "FlowEditor",
    "TemporalHistory",
]
