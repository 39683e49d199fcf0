"""Message buffer: a character sequence with a semantic cursor."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Optional, Union

from chatvim.runtime import telemetry

from .units import Direction, Motion, boundary, is_unit
from .validation import BufferValidationError, ensure_offset

Position = Union[str, int, Motion]

CURSOR = "cursor"


@dataclass(frozen=True, slots=True)
class BufferView:
    version: int
    text: str
    cursor: int


@dataclass(frozen=True, slots=True)
class BufferDelta:
    version: int
    text: str
    cursor: int
    label: str


class TextBuffer:
    """Single-cursor text buffer edited through semantic units.

    The cursor is an offset between characters, ``0 <= cursor <= len(text)``.
    Every mutation goes through :meth:`replace_range`, which bumps the
    version the renderer uses to detect changes.
    """

    def __init__(self, text: str = "", *, name: str = "message") -> None:
        self.name = name
        self._text = text
        self._cursor = len(text)
        self._version = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._text)

    def snapshot(self) -> BufferView:
        return BufferView(version=self._version, text=self._text, cursor=self._cursor)

    def set_cursor(self, offset: int) -> bool:
        offset = ensure_offset(self._text, offset)
        moved = offset != self._cursor
        self._cursor = offset
        return moved

    # motions -----------------------------------------------------------

    def move_forward(self, unit: str) -> bool:
        return self.set_cursor(boundary(self._text, self._cursor, unit, "forward"))

    def move_backward(self, unit: str) -> bool:
        return self.set_cursor(boundary(self._text, self._cursor, unit, "backward"))

    def move_up(self) -> bool:
        line_start = self._text.rfind("\n", 0, self._cursor) + 1
        if line_start == 0:
            return False
        column = self._cursor - line_start
        previous_end = line_start - 1
        previous_start = self._text.rfind("\n", 0, previous_end) + 1
        return self.set_cursor(min(previous_start + column, previous_end))

    def move_down(self) -> bool:
        line_end = self._text.find("\n", self._cursor)
        if line_end < 0:
            return False
        column = self._cursor - (self._text.rfind("\n", 0, self._cursor) + 1)
        next_start = line_end + 1
        next_end = self._text.find("\n", next_start)
        if next_end < 0:
            next_end = len(self._text)
        return self.set_cursor(min(next_start + column, next_end))

    # ranges ------------------------------------------------------------

    def resolve(self, position: Position, direction: Direction = "forward") -> int:
        """Translate a range endpoint into an absolute offset.

        Bare unit names are looked up from the cursor in ``direction``.
        """

        if isinstance(position, Motion):
            return position.target(self._text, self._cursor)
        if isinstance(position, bool):
            raise BufferValidationError(f"{position!r} is not a position")
        if isinstance(position, int):
            return ensure_offset(self._text, position)
        if position == CURSOR:
            return self._cursor
        if is_unit(position):
            return boundary(self._text, self._cursor, position, direction)
        raise BufferValidationError(f"'{position}' is not a position")

    def span(self, start: Position, end: Position) -> tuple[int, int]:
        """Normalized ``(lower, upper)`` offsets of a range.

        A bare unit paired with anything else points forward, so swapping the
        endpoints never changes the range. Two bare units bracket the cursor:
        ``("word_begin", "word_end")`` is the word under it.
        """

        bracket = is_unit(start) and is_unit(end)
        first = self.resolve(start, "backward" if bracket else "forward")
        second = self.resolve(end, "forward")
        return (first, second) if first <= second else (second, first)

    def yank(self, start: Position, end: Position) -> str:
        lower, upper = self.span(start, end)
        return self._text[lower:upper]

    def delete(self, start: Position, end: Position) -> str:
        lower, upper = self.span(start, end)
        removed = self._text[lower:upper]
        if removed:
            self.replace_range(lower, upper, "", label="delete")
        return removed

    def delete_left(self) -> bool:
        if self._cursor == 0:
            return False
        self.replace_range(self._cursor - 1, self._cursor, "", label="delete_left")
        return True

    def delete_right(self) -> bool:
        if self._cursor >= len(self._text):
            return False
        self.replace_range(self._cursor, self._cursor + 1, "", label="delete_right")
        return True

    def insert(self, text: str) -> bool:
        if not text:
            return False
        self.replace_range(self._cursor, self._cursor, text, label="insert")
        return True

    def set_text(self, text: str, *, cursor: Optional[int] = None) -> BufferDelta:
        delta = self.replace_range(0, len(self._text), text, label="set_text")
        if cursor is not None:
            self.set_cursor(cursor)
            delta = BufferDelta(delta.version, delta.text, self._cursor, delta.label)
        return delta

    def clear(self) -> bool:
        if not self._text:
            return False
        self.replace_range(0, len(self._text), "", label="clear")
        return True

    def replace_range(self, start: int, end: int, text: str, *, label: str) -> BufferDelta:
        """Replace ``text[start:end]`` and leave the cursor after the insertion."""

        start = ensure_offset(self._text, start)
        end = ensure_offset(self._text, end)
        if start > end:
            start, end = end, start
        with Transaction(self, label):
            self._text = self._text[:start] + text + self._text[end:]
            self._cursor = start + len(text)
            self._version += 1
        return BufferDelta(
            version=self._version, text=self._text, cursor=self._cursor, label=label
        )


class Transaction(AbstractContextManager["Transaction"]):
    """Profiles one buffer edit."""

    def __init__(self, buffer: TextBuffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = [
    "CURSOR",
    "BufferDelta",
    "BufferView",
    "Position",
    "TextBuffer",
    "Transaction",
]
