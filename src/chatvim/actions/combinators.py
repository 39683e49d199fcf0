"""Higher-order commands composing other commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from .result import NOOP, Command, Result, command_name, invoke

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.core.context import CommandContext


def _validated(name: str, commands: Sequence[Command]) -> tuple[Command, ...]:
    if isinstance(commands, (str, bytes)) or not isinstance(commands, Sequence):
        raise TypeError(f"'{name}' expects a sequence of commands")
    for index, command in enumerate(commands, start=1):
        if not callable(command):
            raise TypeError(f"Argument {index} of '{name}' is not a command")
    return tuple(commands)


def run_first(commands: Sequence[Command]) -> Command:
    """Return the first ``Ok``/``Error`` result; ``NoOp`` if all pass."""

    chain = _validated("run_first", commands)

    def _run_first(context: "CommandContext") -> Result:
        for command in chain:
            result = invoke(command, context)
            if not result.is_noop():
                return result
        return NOOP

    _run_first.__qualname__ = (
        f"run_first({', '.join(command_name(c) for c in chain)})"
    )
    return _run_first


def run_all(commands: Sequence[Command]) -> Command:
    """Run every command, stopping at the first ``Error``.

    Without an error the last command's result is returned (``NoOp`` for an
    empty chain).
    """

    chain = _validated("run_all", commands)

    def _run_all(context: "CommandContext") -> Result:
        result = NOOP
        for command in chain:
            result = invoke(command, context)
            if result.is_error():
                return result
        return result

    _run_all.__qualname__ = f"run_all({', '.join(command_name(c) for c in chain)})"
    return _run_all


__all__ = ["run_first", "run_all"]
