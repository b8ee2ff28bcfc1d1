"""Textual front-end for the rope editor."""

from .controller import CommandResult, EditorController, EditorHooks

__all__ = ["CommandResult", "EditorController", "EditorHooks"]
