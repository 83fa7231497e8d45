"""Utility functions for flowform."""

from flowform.utils.identifiers import (
    edge_id_for,
    generate_node_id,
    generate_option_id,
    utc_timestamp,
)

__all__ = [
    "edge_id_for",
    "generate_node_id",
    "generate_option_id",
    "utc_timestamp",
]
