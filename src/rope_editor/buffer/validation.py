"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .sync import BufferValidationError


def ensure_index(index: int, length: int, *, inclusive: bool = True) -> int:
    """Return ``index`` if it lies in ``[0, length]`` (or ``[0, length)``)."""

    upper = length if inclusive else length - 1
    if index < 0 or index > upper:
        raise BufferValidationError(
            f"Index {index} out of range for length {length}", index=index
        )
    return index


def ensure_range(start: int, end: int, length: int) -> tuple[int, int]:
    if start > end:
        raise BufferValidationError(
            f"Range start {start} is past its end {end}", index=start
        )
    ensure_index(start, length)
    ensure_index(end, length)
    return start, end


def clamp(index: int, length: int) -> int:
    return max(0, min(index, length))
