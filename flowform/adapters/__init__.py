"""Persistence adapters for flow data."""

from flowform.adapters.sinks import FileSink, FlowSink, ListSink, flush

__all__ = [
    "FlowSink",
    "ListSink",
    "FileSink",
    "flush",
]
