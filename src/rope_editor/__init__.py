"""Rope-backed text buffer with cursor navigation and undo/redo."""

__all__ = [
    "adapters",
    "buffer",
    "runtime",
]

__version__ = "0.1.0"
