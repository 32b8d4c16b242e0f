"""Kanban ordering: sort-key maintenance and drag gesture handling."""

from .engine import (
    ORDER_STEP,
    MoveOutcome,
    apply_updates,
    column_items,
    commit_reorder,
    cross_column_move,
    drop_index_from_pointer,
    next_order,
    reorder,
)
from .gesture import (
    DragPayload,
    DragSession,
    DropOutcome,
    decode_payload,
    encode_payload,
)

__all__ = [
    "DragPayload",
    "DragSession",
    "DropOutcome",
    "MoveOutcome",
    "ORDER_STEP",
    "apply_updates",
    "column_items",
    "commit_reorder",
    "cross_column_move",
    "decode_payload",
    "drop_index_from_pointer",
    "encode_payload",
    "next_order",
    "reorder",
]
