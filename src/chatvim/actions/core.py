"""Commands that forward to a method of the invocation context."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from .result import NOOP, Command, Result

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.core.context import CommandContext


def _describe(value: Any) -> str:
    return repr(value) if isinstance(value, str) else str(value)


def context_command(name: str) -> Command:
    """``quit``-style shortcut: calls ``context.<name>()``."""

    def _command(context: "CommandContext") -> Result:
        return getattr(context, name)()

    _command.__qualname__ = name
    _command.__name__ = name
    return _command


def context_factory(name: str) -> Callable[..., Command]:
    """``push_mode("insert")``-style shortcut: binds arguments now, runs later."""

    def _factory(*args: Any) -> Command:
        def _command(context: "CommandContext") -> Result:
            return getattr(context, name)(*args)

        _command.__qualname__ = f"{name}({', '.join(_describe(a) for a in args)})"
        _command.__name__ = name
        return _command

    _factory.__qualname__ = name
    _factory.__name__ = name
    return _factory


def noop(context: "CommandContext") -> Result:
    return NOOP


__all__ = ["context_command", "context_factory", "noop"]
