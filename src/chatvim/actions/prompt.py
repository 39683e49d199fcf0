"""Confirm and cancel protocols shared by prompt-style modes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from .combinators import run_all, run_first
from .core import context_command
from .result import OK, Command, Result, coerce

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.core.context import CommandContext

ContentAction = Callable[["CommandContext", str], Result]


def finish_auxline(action: ContentAction) -> Command:
    """Accept non-empty content, hand it to ``action``, then always pop.

    Empty content skips ``action`` and yields ``Ok``.
    """

    def _finish(context: "CommandContext") -> Result:
        content = context.get_auxline_content()
        result = OK
        try:
            if content:
                context.accept_auxline()
                result = coerce(action(context, content), action)
        finally:
            context.pop_mode()
        return result

    _finish.__qualname__ = f"finish_auxline({getattr(action, '__qualname__', action)!s})"
    return _finish


# An error banner swallows the first cancel; the next one leaves the mode.
cancel_auxline: Command = run_first(
    [
        context_command("clear_error_message"),
        run_all([context_command("clear_auxline"), context_command("pop_mode")]),
    ]
)


__all__ = ["ContentAction", "cancel_auxline", "finish_auxline"]
