"""Rope-backed buffer, cursor, and undo/redo data structures."""

from .buffer import Buffer, Transaction, unescape
from .lines import LineIndex
from .rope import Internal, Leaf, RopeNode
from .state import Cursor, CursorState
from .sync import BufferMirror, BufferValidationError
from .undo import DEFAULT_HISTORY_LIMIT, HistoryManager
from .validation import clamp, ensure_index, ensure_range

__all__ = [
    "Buffer",
    "BufferMirror",
    "BufferValidationError",
    "Cursor",
    "CursorState",
    "DEFAULT_HISTORY_LIMIT",
    "HistoryManager",
    "Internal",
    "Leaf",
    "LineIndex",
    "RopeNode",
    "Transaction",
    "clamp",
    "ensure_index",
    "ensure_range",
    "unescape",
]
