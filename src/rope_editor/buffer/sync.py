"""Adapter boundary types for syncing buffers with host widgets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the current buffer state."""

    text: str
    index: int
    row: int
    col: int
    filename: Optional[str] = None
    dirty: bool = False
    version: int = 0


class BufferValidationError(RuntimeError):
    """Raised when a rope or buffer receives an out-of-bounds index."""

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index
