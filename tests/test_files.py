from __future__ import annotations

from pathlib import Path

import pytest

from rope_editor.buffer import Buffer, BufferValidationError, Leaf


def test_open_loads_single_leaf(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("first\nsecond\n", encoding="utf-8")

    buffer = Buffer.open(path)

    assert isinstance(buffer.root, Leaf)
    assert buffer.text() == "first\nsecond\n"
    assert buffer.filename == str(path)
    assert buffer.name == "notes.txt"
    assert buffer.cursor.position == (0, 0)
    assert buffer.dirty is False


def test_open_missing_file_propagates_error(tmp_path: Path) -> None:
    buffer = Buffer.from_text("keep me")

    with pytest.raises(FileNotFoundError):
        buffer.open_file(tmp_path / "missing.txt")

    assert buffer.text() == "keep me"


def test_open_file_resets_history(tmp_path: Path) -> None:
    path = tmp_path / "a.txt"
    path.write_text("disk", encoding="utf-8")
    buffer = Buffer()
    buffer.insert_at_cursor("scratch")

    buffer.open_file(path)

    assert buffer.undo() is False
    assert buffer.text() == "disk"


def test_save_writes_text_verbatim(tmp_path: Path) -> None:
    path = tmp_path / "out.txt"
    buffer = Buffer()
    buffer.insert_at_cursor("crlf\r\nünïcode\nno trailing newline")

    buffer.save_as(path)

    assert path.read_bytes() == "crlf\r\nünïcode\nno trailing newline".encode("utf-8")
    assert buffer.filename == str(path)
    assert buffer.dirty is False


def test_load_preserves_carriage_returns(tmp_path: Path) -> None:
    path = tmp_path / "dos.txt"
    path.write_bytes(b"a\r\nb")

    buffer = Buffer.open(path)

    assert buffer.text() == "a\r\nb"
    assert buffer.length() == 4


def test_save_round_trip_after_edit(tmp_path: Path) -> None:
    path = tmp_path / "doc.txt"
    path.write_text("hello\nworld", encoding="utf-8")
    buffer = Buffer.open(path)

    buffer.delete_current_line()
    buffer.save()

    assert path.read_text(encoding="utf-8") == "world"


def test_save_without_filename_raises() -> None:
    with pytest.raises(BufferValidationError):
        Buffer.from_text("orphan").save()


def test_save_into_missing_directory_propagates(tmp_path: Path) -> None:
    buffer = Buffer.from_text("data")

    with pytest.raises(OSError):
        buffer.save_as(tmp_path / "nope" / "file.txt")


def test_undo_back_to_opened_text_clears_dirty(tmp_path: Path) -> None:
    path = tmp_path / "doc.txt"
    path.write_text("hello", encoding="utf-8")
    buffer = Buffer.open(path)
    buffer.move_to_buffer_end()
    buffer.insert_at_cursor("!")

    buffer.undo()

    assert buffer.text() == "hello"
    assert buffer.dirty is False

    buffer.redo()

    assert buffer.text() == "hello!"
    assert buffer.dirty is True


def test_undo_past_save_point_marks_dirty(tmp_path: Path) -> None:
    path = tmp_path / "doc.txt"
    buffer = Buffer()
    buffer.insert_at_cursor("one")
    buffer.save_as(path)
    buffer.insert_at_cursor("two")

    buffer.undo()

    assert buffer.dirty is False

    buffer.undo()

    assert buffer.text() == ""
    assert buffer.dirty is True
