"""Line-start offset table kept alongside the rope.

Row/column lookups bisect this table instead of flattening the whole buffer.
Edits shift the table in place; callers rebuild it with ``from_text`` only
when an entire root is swapped in (file load, undo, redo).
"""

from __future__ import annotations

from bisect import bisect_right
from typing import List, Tuple

from .sync import BufferValidationError


class LineIndex:
    def __init__(self, starts: List[int] | None = None, length: int = 0) -> None:
        self._starts: List[int] = list(starts) if starts else [0]
        self._length = length

    @classmethod
    def from_text(cls, text: str) -> "LineIndex":
        starts = [0]
        starts.extend(i + 1 for i, ch in enumerate(text) if ch == "\n")
        return cls(starts, len(text))

    @property
    def line_count(self) -> int:
        return len(self._starts)

    @property
    def length(self) -> int:
        return self._length

    def locate(self, index: int) -> Tuple[int, int]:
        """Return ``(row, col)`` for a linear index."""

        row = bisect_right(self._starts, index) - 1
        return row, index - self._starts[row]

    def line_start(self, row: int) -> int:
        self._check_row(row)
        return self._starts[row]

    def line_end(self, row: int) -> int:
        """Index of the newline ending ``row``, or the buffer end on the last row."""

        self._check_row(row)
        if row + 1 < len(self._starts):
            return self._starts[row + 1] - 1
        return self._length

    def line_length(self, row: int) -> int:
        return self.line_end(row) - self.line_start(row)

    def apply_insert(self, index: int, text: str) -> None:
        row = bisect_right(self._starts, index) - 1
        size = len(text)
        added = [index + i + 1 for i, ch in enumerate(text) if ch == "\n"]
        shifted = [start + size for start in self._starts[row + 1 :]]
        self._starts[row + 1 :] = added + shifted
        self._length += size

    def apply_delete(self, start: int, end: int) -> None:
        size = end - start
        # Line starts inside (start, end] belonged to removed newlines.
        lo = bisect_right(self._starts, start)
        hi = bisect_right(self._starts, end)
        self._starts[lo:] = [offset - size for offset in self._starts[hi:]]
        self._length -= size

    def _check_row(self, row: int) -> None:
        if row < 0 or row >= len(self._starts):
            raise BufferValidationError(f"Row {row} out of range", index=row)
