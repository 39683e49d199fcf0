import pytest

from chatvim.buffer import (
    BufferValidationError,
    ClipboardRegister,
    TextBuffer,
    backward,
    boundary,
    forward,
)
from chatvim.buffer.units import sentence_starts


def make_buffer(text: str, cursor: int) -> TextBuffer:
    buffer = TextBuffer(text)
    buffer.set_cursor(cursor)
    return buffer


def test_word_end_is_exclusive() -> None:
    buffer = make_buffer("hello world", 0)

    assert buffer.move_forward("word_end")
    assert buffer.cursor == 5


def test_delete_cursor_to_word_end() -> None:
    buffer = make_buffer("hello world", 0)

    removed = buffer.delete("cursor", "word_end")

    assert removed == "hello"
    assert buffer.text == " world"
    assert buffer.cursor == 0


def test_word_and_big_word_boundaries() -> None:
    text = "foo.bar baz"

    assert boundary(text, 0, "word_begin", "forward") == 3
    assert boundary(text, 0, "WORD_begin", "forward") == 8
    assert boundary(text, 11, "word_begin", "backward") == 8
    assert boundary(text, 7, "WORD_begin", "backward") == 0
    assert boundary(text, 8, "WORD_end", "backward") == 7


def test_line_and_document_boundaries() -> None:
    text = "ab\ncd\nef"

    assert boundary(text, 4, "line_separator", "forward") == 5
    assert boundary(text, 4, "line_separator", "backward") == 3
    assert boundary(text, 4, "document_boundary", "forward") == len(text)
    assert boundary(text, 4, "document_boundary", "backward") == 0


def test_sentence_starts() -> None:
    assert sentence_starts("One. Two! Three") == [0, 5, 10]
    assert sentence_starts("Version 1.2 is out") == [0]
    assert boundary("One. Two! Three", 6, "sentence", "backward") == 5


def test_unknown_unit_is_rejected() -> None:
    with pytest.raises(ValueError, match="not a text unit"):
        boundary("abc", 0, "paragraph", "forward")
    with pytest.raises(ValueError):
        forward("paragraph")


def test_yank_is_order_independent() -> None:
    buffer = make_buffer("first line\nsecond line", 14)

    assert buffer.yank("line_separator", "cursor") == buffer.yank(
        "cursor", "line_separator"
    )
    assert buffer.yank(20, "cursor") == buffer.yank("cursor", 20) == "ond li"


def test_explicit_motions_and_unit_pairs() -> None:
    buffer = make_buffer("first line\nsecond line", 14)

    assert buffer.yank(backward("line_separator"), "cursor") == "sec"
    assert buffer.yank("cursor", forward("line_separator")) == "ond line"
    assert buffer.yank("line_separator", "line_separator") == "second line"
    assert buffer.yank("word_begin", "word_end") == "second"
    assert buffer.cursor == 14


def test_invalid_positions_raise() -> None:
    buffer = make_buffer("abc", 1)

    with pytest.raises(BufferValidationError):
        buffer.yank(0, 10)
    with pytest.raises(BufferValidationError):
        buffer.yank("somewhere", "cursor")
    with pytest.raises(BufferValidationError):
        buffer.set_cursor(-1)


def test_vertical_motion_keeps_column() -> None:
    buffer = make_buffer("abcdef\nxy\nlonger line", 4)

    assert buffer.move_down()
    assert buffer.cursor == 9  # clamped to the end of "xy"
    assert buffer.move_down()
    assert buffer.cursor == 12
    assert buffer.move_up()
    assert buffer.move_up()
    assert buffer.cursor == 2
    assert not buffer.move_up()


def test_edits_bump_version() -> None:
    buffer = TextBuffer()

    assert buffer.insert("hi")
    assert buffer.delete_left()
    assert not buffer.insert("")
    assert buffer.text == "h"
    assert buffer.version == 2
    assert buffer.snapshot().cursor == 1
    assert buffer.clear()
    assert not buffer.clear()


def test_clipboard_register_round_trips_through_sink() -> None:
    copied = []
    register = ClipboardRegister(sink=copied.append)

    register.set("hello")

    assert register.get() == "hello"
    assert copied == ["hello"]
