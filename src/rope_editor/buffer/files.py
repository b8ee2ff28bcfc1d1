"""Plain UTF-8 file access for buffers.

``OSError`` and its subclasses propagate unchanged to the caller.
"""

from __future__ import annotations

import os
from typing import Union

from rope_editor.runtime import telemetry

PathLike = Union[str, "os.PathLike[str]"]


def load_text(path: PathLike) -> str:
    # newline="" keeps "\r\n" and lone "\r" exactly as stored.
    with open(path, "r", encoding="utf-8", newline="") as handle:
        text = handle.read()
    telemetry.record_event(
        "file.load",
        data={"path": os.fspath(path), "length": len(text)},
        logger_name="rope_editor.files",
    )
    return text


def save_text(path: PathLike, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)
    telemetry.record_event(
        "file.save",
        data={"path": os.fspath(path), "length": len(text)},
        logger_name="rope_editor.files",
    )


__all__ = ["load_text", "save_text"]
