"""Executable Textual app that hosts the rope editor."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional, Sequence

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.widgets import Input, Static

from rope_editor.buffer import Buffer, BufferMirror
from rope_editor.runtime import telemetry

from .controller import CommandResult, EditorController, EditorHooks

_PROMPTS = {"prompt_save": "Save as", "prompt_open": "Open file"}


def render_buffer(mirror: BufferMirror) -> Text:
    """Render buffer text with the cursor cell shown in reverse video."""

    text = Text(no_wrap=True)
    text.append(mirror.text[: mirror.index])
    at = mirror.text[mirror.index : mirror.index + 1]
    if at in ("", "\n"):
        text.append(" ", style="reverse")
        text.append(at)
    else:
        text.append(at, style="reverse")
    text.append(mirror.text[mirror.index + 1 :])
    return text


def open_buffer(path: Optional[str]) -> Buffer:
    """Load ``path`` if it exists; a missing file starts an empty named buffer."""

    if path is None:
        return Buffer()
    try:
        return Buffer.open(path)
    except FileNotFoundError:
        buffer = Buffer()
        buffer.filename = path
        return buffer


@dataclass
class UIState:
    status_text: str = ""
    prompt: Optional[str] = None


class RopeEditorApp(App[None]):
    """Full-screen editor around a single ``Buffer``."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		padding: 0 1;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#prompt {
		display: none;
	}
	"""

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
    ]

    ENABLE_COMMAND_PALETTE = False

    def __init__(self, buffer: Optional[Buffer] = None) -> None:
        super().__init__()
        self.buffer = buffer or Buffer()
        self._state = UIState()
        self.controller: EditorController | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        self._prompt_widget: Input | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        self._prompt_widget = Input(id="prompt")
        yield self._status_widget
        yield self._prompt_widget

    def on_mount(self) -> None:
        hooks = EditorHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            log=self._log_line,
        )
        self.controller = EditorController(self.buffer, hooks)
        self._update_status(self.controller.status_line())

    def on_key(self, event: events.Key) -> None:
        if not self.controller:
            return
        if self._state.prompt is not None:
            if event.key == "escape":
                self._close_prompt()
                self._update_status(self.controller.status_line("Cancelled"))
                event.stop()
            return
        character = event.character if event.is_printable else None
        result = self.controller.handle_key(event.key, character=character)
        if result.consumed:
            event.stop()
            event.prevent_default()
        if result.status in _PROMPTS:
            self._open_prompt(result)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        purpose = self._state.prompt
        value = event.value.strip()
        self._close_prompt()
        if not self.controller or not value:
            return
        if purpose == "prompt_save":
            self.controller.save_as(value)
        elif purpose == "prompt_open":
            self.controller.open_file(value)

    def _open_prompt(self, result: CommandResult) -> None:
        self._state.prompt = result.status
        if self._prompt_widget:
            self._prompt_widget.placeholder = _PROMPTS[result.status]
            self._prompt_widget.value = ""
            self._prompt_widget.display = True
            self._prompt_widget.focus()

    def _close_prompt(self) -> None:
        self._state.prompt = None
        if self._prompt_widget:
            self._prompt_widget.display = False
        self.set_focus(None)

    def _update_buffer(self, mirror: BufferMirror) -> None:
        if self._buffer_widget:
            self._buffer_widget.update(render_buffer(mirror))

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _log_line(self, line: str) -> None:
        telemetry.get_logger("rope_editor.app").debug(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit a UTF-8 text file.")
    parser.add_argument("path", nargs="?", help="File to open (created on save)")
    parser.add_argument(
        "--preset",
        choices=("development", "production", "performance"),
        default=telemetry.env("PRESET"),
        help="Telemetry preset (default: environment-driven configuration)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.preset:
        telemetry.configure(preset=args.preset)
    app = RopeEditorApp(open_buffer(args.path))
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
