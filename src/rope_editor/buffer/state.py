"""Cursor state tied to a buffer's current root."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Cursor = Tuple[int, int]  # (row, column)


@dataclass(slots=True)
class CursorState:
    """Linear cursor index plus the row/column derived from it."""

    index: int = 0
    row: int = 0
    col: int = 0

    @property
    def position(self) -> Cursor:
        return (self.row, self.col)

    def set_position(self, row: int, col: int) -> None:
        self.row = row
        self.col = col
