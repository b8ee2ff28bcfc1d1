"""Undo/redo history of rope roots.

Entries are plain root references. Because rope nodes are immutable, a
snapshot costs one deque append no matter how large the buffer is.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from rope_editor.runtime import telemetry

from .rope import RopeNode

DEFAULT_HISTORY_LIMIT = 1000


class HistoryManager:
    """Bounded undo stack plus a redo stack cleared on every new edit."""

    def __init__(self, limit: int | None = None) -> None:
        if limit is None:
            limit = telemetry.env_int("HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)
        if limit < 1:
            raise ValueError("history limit must be positive")
        self.limit = limit
        self._undo: Deque[RopeNode] = deque(maxlen=limit)
        self._redo: Deque[RopeNode] = deque(maxlen=limit)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def snapshot(self, root: RopeNode) -> None:
        # deque(maxlen=...) drops the oldest entry once the cap is reached.
        self._undo.append(root)
        self._redo.clear()

    def undo(self, current: RopeNode) -> Optional[RopeNode]:
        if not self._undo:
            return None
        previous = self._undo.pop()
        self._redo.append(current)
        return previous

    def redo(self, current: RopeNode) -> Optional[RopeNode]:
        if not self._redo:
            return None
        following = self._redo.pop()
        self._undo.append(current)
        return following

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
