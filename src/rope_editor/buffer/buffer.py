"""High-level buffer façade combining the rope, cursor, line table, and history."""

from __future__ import annotations

import os
import re
from contextlib import AbstractContextManager
from typing import ContextManager, Optional

from rope_editor.runtime import telemetry

from . import files, rope
from .lines import LineIndex
from .rope import RopeNode
from .state import CursorState
from .sync import BufferMirror, BufferValidationError
from .undo import HistoryManager
from .validation import clamp

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\"}
_ESCAPE_PATTERN = re.compile(r"\\([ntr\\])")


def unescape(text: str) -> str:
    r"""Collapse literal ``\n``, ``\t``, ``\r`` and ``\\`` in one left-to-right pass."""

    return _ESCAPE_PATTERN.sub(lambda match: _ESCAPES[match.group(1)], text)


class Buffer:
    def __init__(
        self,
        *,
        name: str = "default",
        root: Optional[RopeNode] = None,
        filename: Optional[str] = None,
        history: Optional[HistoryManager] = None,
    ) -> None:
        self.name = name
        self.root: RopeNode = root if root is not None else rope.from_text("")
        self.filename = filename
        self.history = history or HistoryManager()
        self.cursor = CursorState()
        self.lines = LineIndex.from_text(rope.flatten(self.root))
        self.version = 0
        self.dirty = False
        self._saved_root: RopeNode = self.root

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Buffer":
        return cls(name=name, root=rope.from_text(text))

    @classmethod
    def open(cls, path: files.PathLike, *, name: Optional[str] = None) -> "Buffer":
        buffer = cls(name=name or os.path.basename(os.fspath(path)) or "default")
        buffer.open_file(path)
        return buffer

    # -- file operations ---------------------------------------------------

    def open_file(self, path: files.PathLike) -> None:
        """Replace the content with the file at ``path`` as a single leaf."""

        text = files.load_text(path)
        self._swap_root(rope.from_text(text))
        self.history.clear()
        self.cursor = CursorState()
        self.filename = os.fspath(path)
        self._mark_saved()

    def save(self) -> None:
        if self.filename is None:
            raise BufferValidationError("Buffer has no filename to save to")
        files.save_text(self.filename, self.text())
        self._mark_saved()

    def save_as(self, path: files.PathLike) -> None:
        self.filename = os.fspath(path)
        self.save()

    # -- queries -----------------------------------------------------------

    def length(self) -> int:
        return self.root.length

    def text(self) -> str:
        return rope.flatten(self.root)

    def char_at(self, index: int) -> str:
        return rope.char_at(self.root, index)

    def line_count(self) -> int:
        return self.lines.line_count

    def line(self, row: int) -> str:
        start = self.lines.line_start(row)
        return rope.substring(self.root, start, self.lines.line_end(row))

    def mirror(self) -> BufferMirror:
        return BufferMirror(
            text=self.text(),
            index=self.cursor.index,
            row=self.cursor.row,
            col=self.cursor.col,
            filename=self.filename,
            dirty=self.dirty,
            version=self.version,
        )

    # -- editing -----------------------------------------------------------

    def insert_at_cursor(self, text: str) -> None:
        processed = unescape(text)
        with Transaction(self, "insert_at_cursor"):
            self._insert(self.cursor.index, processed)
            self._set_index(self.cursor.index + len(processed))

    def delete_at_cursor(self, count: int = 1) -> None:
        """Remove up to ``count`` characters before the cursor."""

        end = min(self.cursor.index, self.length())
        start = max(0, end - max(count, 0))
        with Transaction(self, "delete_at_cursor"):
            self._delete(start, end)
            self._set_index(start)

    def insert_newline_above(self) -> None:
        with Transaction(self, "insert_newline_above"):
            self.move_to_line_start()
            self._insert(self.cursor.index, "\n")
            self._update_cursor_position()

    def insert_newline_below(self) -> None:
        with Transaction(self, "insert_newline_below"):
            self.move_to_line_end()
            self._insert(self.cursor.index, "\n")
            self._set_index(self.cursor.index + 1)

    def delete_current_line(self) -> None:
        row = self.cursor.row
        start = self.lines.line_start(row)
        end = self.lines.line_end(row)
        if row + 1 < self.lines.line_count:
            end += 1
        with Transaction(self, "delete_current_line"):
            self._delete(start, end)
            self._set_index(start)

    # -- cursor motion -----------------------------------------------------

    def move_left(self) -> None:
        if self.cursor.index > 0:
            self._set_index(self.cursor.index - 1)

    def move_right(self) -> None:
        if self.cursor.index < self.length():
            self._set_index(self.cursor.index + 1)

    def move_up(self) -> None:
        if self.cursor.row > 0:
            self._move_to_row(self.cursor.row - 1)

    def move_down(self) -> None:
        if self.cursor.row + 1 < self.lines.line_count:
            self._move_to_row(self.cursor.row + 1)

    def move_to_line_start(self) -> None:
        self._set_index(self.lines.line_start(self.cursor.row))

    def move_to_line_end(self) -> None:
        self._set_index(self.lines.line_end(self.cursor.row))

    def move_to_buffer_start(self) -> None:
        self._set_index(0)

    def move_to_buffer_end(self) -> None:
        self._set_index(self.length())

    def move_to(self, index: int) -> None:
        self._set_index(index)

    def move_word_right(self) -> None:
        size = self.length()
        index = self.cursor.index
        while index < size and self.char_at(index).isspace():
            index += 1
        while index < size and not self.char_at(index).isspace():
            index += 1
        self._set_index(index)

    def move_word_left(self) -> None:
        if self.cursor.index == 0:
            return
        index = self.cursor.index - 1
        while index > 0 and self.char_at(index).isspace():
            index -= 1
        while index > 0 and not self.char_at(index - 1).isspace():
            index -= 1
        self._set_index(index)

    # -- history -----------------------------------------------------------

    def undo(self) -> bool:
        previous = self.history.undo(self.root)
        if previous is None:
            return False
        self._restore(previous, label="undo")
        return True

    def redo(self) -> bool:
        following = self.history.redo(self.root)
        if following is None:
            return False
        self._restore(following, label="redo")
        return True

    # -- internals ---------------------------------------------------------

    def _insert(self, index: int, text: str) -> None:
        if not text:
            return
        self.root = rope.insert(self.root, index, text)
        self.lines.apply_insert(index, text)
        self._touch()

    def _delete(self, start: int, end: int) -> None:
        if start == end:
            return
        self.root = rope.delete(self.root, start, end)
        self.lines.apply_delete(start, end)
        self._touch()

    def _touch(self) -> None:
        self.version += 1
        self.dirty = True

    def _mark_saved(self) -> None:
        self._saved_root = self.root
        self.dirty = False

    def _swap_root(self, root: RopeNode) -> None:
        self.root = root
        self.lines = LineIndex.from_text(rope.flatten(root))
        self.version += 1

    def _restore(self, root: RopeNode, *, label: str) -> None:
        self._swap_root(root)
        self.dirty = root is not self._saved_root
        self._set_index(self.cursor.index)
        telemetry.record_event(
            f"buffer.{label}",
            data={
                "buffer": self.name,
                "undo_depth": self.history.undo_depth,
                "redo_depth": self.history.redo_depth,
            },
            logger_name="rope_editor.buffer",
        )

    def _move_to_row(self, row: int) -> None:
        col = min(self.cursor.col, self.lines.line_length(row))
        self._set_index(self.lines.line_start(row) + col)

    def _set_index(self, index: int) -> None:
        self.cursor.index = clamp(index, self.length())
        self._update_cursor_position()

    def _update_cursor_position(self) -> None:
        self.cursor.set_position(*self.lines.locate(self.cursor.index))


class Transaction(AbstractContextManager["Transaction"]):
    """Groups the edits of one command into a single history snapshot.

    The pre-command root is pushed onto the history when the block exits
    having replaced the root. If the block raises, the buffer is put back
    to its pre-command root, cursor, version and dirty flag.
    """

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._before_root: Optional[RopeNode] = None
        self._before_index = 0
        self._before_version = 0
        self._before_dirty = False

    def __enter__(self) -> "Transaction":
        self._before_root = self.buffer.root
        self._before_index = self.buffer.cursor.index
        self._before_version = self.buffer.version
        self._before_dirty = self.buffer.dirty
        self._span_cm = telemetry.span(
            f"buffer::{self.label}",
            component="buffer",
            logger_name="rope_editor.buffer",
            buffer=self.buffer.name,
            command=self.label,
            index=self._before_index,
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        before = self._before_root
        assert before is not None
        if exc_type is not None:
            if self.buffer.root is not before:
                self.buffer._swap_root(before)
            self.buffer.version = self._before_version
            self.buffer.dirty = self._before_dirty
            self.buffer._set_index(self._before_index)
        elif self.buffer.root is not before:
            self.buffer.history.snapshot(before)
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["Buffer", "Transaction", "unescape"]
