"""vim-style operator composites over a ``(from, to)`` range.

Each composite runs its side effects in a fixed order: copy the range into
the clipboard, then (delete/change) remove it, then (change) enter the line
insert mode. Nothing is mutated before the yank succeeded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from chatvim.buffer import Position

from .result import OK, Command, Result

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.core.context import CommandContext

INSERT_LINE_MODE = "insert-line"


def _label(name: str, start: Position, end: Position) -> str:
    return f"{name}({start!r}, {end!r})"


def vim_yank(start: Position, end: Position) -> Command:
    def _yank(context: "CommandContext") -> Result:
        context.set_clipboard(context.cursor_yank(start, end))
        return OK

    _yank.__qualname__ = _label("vim_yank", start, end)
    return _yank


def vim_delete(start: Position, end: Position) -> Command:
    def _delete(context: "CommandContext") -> Result:
        context.set_clipboard(context.cursor_yank(start, end))
        result = context.cursor_delete(start, end)
        return result if result.is_error() else OK

    _delete.__qualname__ = _label("vim_delete", start, end)
    return _delete


def vim_change(start: Position, end: Position) -> Command:
    def _change(context: "CommandContext") -> Result:
        context.set_clipboard(context.cursor_yank(start, end))
        result = context.cursor_delete(start, end)
        if result.is_error():
            return result
        return context.push_mode(INSERT_LINE_MODE)

    _change.__qualname__ = _label("vim_change", start, end)
    return _change


def paste_before(context: "CommandContext") -> Result:
    return context.type(context.get_clipboard())


def paste_after(context: "CommandContext") -> Result:
    moved = context.cursor_move_forward("cell")
    content = context.get_clipboard()
    if moved.is_ok() and not content:
        context.cursor_move_backward("cell")
    return context.type(content)


__all__ = [
    "INSERT_LINE_MODE",
    "paste_after",
    "paste_before",
    "vim_change",
    "vim_delete",
    "vim_yank",
]
