"""Key dispatch that turns host key tokens into buffer commands."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from rope_editor.buffer import Buffer, BufferMirror
from rope_editor.runtime import telemetry

CommandHandler = Callable[[Buffer], object]


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class EditorHooks:
    """Callbacks invoked by the controller to update host widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


@dataclass(slots=True)
class CommandResult:
    consumed: bool
    command: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None


_COMMANDS: Dict[str, CommandHandler] = {
    "move_left": Buffer.move_left,
    "move_right": Buffer.move_right,
    "move_up": Buffer.move_up,
    "move_down": Buffer.move_down,
    "move_to_line_start": Buffer.move_to_line_start,
    "move_to_line_end": Buffer.move_to_line_end,
    "move_to_buffer_start": Buffer.move_to_buffer_start,
    "move_to_buffer_end": Buffer.move_to_buffer_end,
    "move_word_left": Buffer.move_word_left,
    "move_word_right": Buffer.move_word_right,
    "newline": lambda buffer: buffer.insert_at_cursor("\n"),
    "tab": lambda buffer: buffer.insert_at_cursor("\t"),
    "backspace": Buffer.delete_at_cursor,
    "insert_newline_above": Buffer.insert_newline_above,
    "insert_newline_below": Buffer.insert_newline_below,
    "delete_current_line": Buffer.delete_current_line,
    "undo": Buffer.undo,
    "redo": Buffer.redo,
}

DEFAULT_KEYMAP: Dict[str, str] = {
    "left": "move_left",
    "right": "move_right",
    "up": "move_up",
    "down": "move_down",
    "home": "move_to_line_start",
    "end": "move_to_line_end",
    "ctrl+home": "move_to_buffer_start",
    "ctrl+end": "move_to_buffer_end",
    "ctrl+b": "move_word_left",
    "ctrl+f": "move_word_right",
    "enter": "newline",
    "tab": "tab",
    "backspace": "backspace",
    "ctrl+p": "insert_newline_above",
    "ctrl+n": "insert_newline_below",
    "ctrl+k": "delete_current_line",
    "ctrl+z": "undo",
    "ctrl+y": "redo",
    "ctrl+s": "save",
    "ctrl+a": "save",
    "ctrl+o": "open",
}


class EditorController:
    """Bridges key tokens to a ``Buffer`` and reports results through hooks."""

    def __init__(
        self,
        buffer: Buffer,
        hooks: EditorHooks,
        *,
        keymap: Optional[Dict[str, str]] = None,
    ) -> None:
        self.buffer = buffer
        self.hooks = hooks
        self.keymap = dict(DEFAULT_KEYMAP if keymap is None else keymap)
        self._refresh_buffer()

    def handle_key(self, key: str, *, character: Optional[str] = None) -> CommandResult:
        """Dispatch one key; ``character`` is set for printable keys."""

        self._log_state("key ->", key=key, character=character)
        command = self.keymap.get(key)
        if command is not None:
            result = self.run_command(command)
        elif character:
            result = self._run(
                "insert", lambda buffer: buffer.insert_at_cursor(character)
            )
        else:
            result = CommandResult(consumed=False, status="unbound", message=key)
        self._log_state(
            "result <-",
            consumed=result.consumed,
            command=result.command,
            status=result.status,
            message=result.message,
        )
        return result

    def run_command(self, command: str) -> CommandResult:
        if command == "save":
            return self.save()
        if command == "open":
            return CommandResult(consumed=True, command="open", status="prompt_open")
        handler = _COMMANDS.get(command)
        if handler is None:
            return CommandResult(consumed=False, status="unknown_command", message=command)
        return self._run(command, handler)

    def save(self) -> CommandResult:
        if self.buffer.filename is None:
            return CommandResult(consumed=True, command="save", status="prompt_save")
        return self.save_as(self.buffer.filename)

    def save_as(self, path: str) -> CommandResult:
        try:
            self.buffer.save_as(path)
        except OSError as exc:
            return self._report("save", "save_failed", f"Failed to save {path}: {exc}")
        return self._report("save", "saved", f"Saved {path}")

    def open_file(self, path: str) -> CommandResult:
        try:
            self.buffer.open_file(path)
        except OSError as exc:
            return self._report("open", "open_failed", f"Failed to open {path}: {exc}")
        return self._report("open", "opened", f"Opened {os.path.basename(path)}")

    def status_line(self, message: Optional[str] = None) -> str:
        cursor = self.buffer.cursor
        name = self.buffer.filename or "[No Name]"
        marker = " [+]" if self.buffer.dirty else ""
        status = f"{name}{marker} | Ln {cursor.row + 1}, Col {cursor.col + 1}"
        if message:
            status = f"{status} | {message}"
        return status

    def _run(self, command: str, handler: CommandHandler) -> CommandResult:
        outcome = handler(self.buffer)
        status = "noop" if outcome is False else "ok"
        result = CommandResult(consumed=True, command=command, status=status)
        self._refresh_buffer()
        self.hooks.update_status(self.status_line())
        return result

    def _report(self, command: str, status: str, message: str) -> CommandResult:
        level = "error" if status.endswith("failed") else "info"
        telemetry.record_event(
            f"controller.{command}",
            level=level,
            data={"status": status, "message": message},
            logger_name="rope_editor.controller",
        )
        self._refresh_buffer()
        self.hooks.update_status(self.status_line(message))
        return CommandResult(consumed=True, command=command, status=status, message=message)

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.buffer.mirror())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot: Dict[str, object] = {
            "index": self.buffer.cursor.index,
            "cursor": self.buffer.cursor.position,
            "version": self.buffer.version,
            "undo": self.buffer.history.undo_depth,
        }
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))


__all__ = ["CommandResult", "DEFAULT_KEYMAP", "EditorController", "EditorHooks"]
