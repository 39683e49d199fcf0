"""Three-valued command outcome shared by every command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Literal, Optional

from chatvim.errors import CommandError, ScriptRuntimeError
from chatvim.runtime import telemetry

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.core.context import CommandContext

ResultKind = Literal["ok", "error", "noop"]


@dataclass(frozen=True, slots=True)
class Result:
    """``Ok``, ``Error(message)`` or ``NoOp``.

    ``NoOp`` means "not handled, try the next command"; ``Error`` carries a
    user-facing message and halts ``run_all`` chains.
    """

    kind: ResultKind
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind == "error" and not self.message:
            object.__setattr__(self, "message", "Unknown error")
        elif self.kind != "error" and self.message is not None:
            raise ValueError("only error results carry a message")

    def is_ok(self) -> bool:
        return self.kind == "ok"

    def is_error(self) -> bool:
        return self.kind == "error"

    def is_noop(self) -> bool:
        return self.kind == "noop"

    def __repr__(self) -> str:
        if self.kind == "error":
            return f"Error({self.message!r})"
        return "Ok" if self.kind == "ok" else "NoOp"


OK = Result("ok")
NOOP = Result("noop")

Command = Callable[["CommandContext"], Result]


def res_ok() -> Result:
    return OK


def res_noop() -> Result:
    return NOOP


def res_error(message: str) -> Result:
    return Result("error", str(message))


def from_flag(changed: bool) -> Result:
    """``Ok`` when an operation changed state, ``NoOp`` when it did nothing."""

    return OK if changed else NOOP


def is_ok(result: Result) -> bool:
    return result.is_ok()


def is_error(result: Result) -> bool:
    return result.is_error()


def is_noop(result: Result) -> bool:
    return result.is_noop()


def command_name(command: object) -> str:
    return getattr(command, "__qualname__", None) or repr(command)


def invoke(command: Command, context: "CommandContext") -> Result:
    """Run ``command`` and fold any escaping exception into ``Error``."""

    try:
        outcome = command(context)
    except CommandError as exc:
        return res_error(str(exc))
    except SystemExit as exc:
        telemetry.record_event(
            "command.exit_blocked",
            level="warning",
            data={"command": command_name(command), "code": repr(exc.code)},
        )
        return res_error(
            f"Commands cannot exit the client (exit code {exc.code!r}), use quit"
        )
    except Exception as exc:
        failure = ScriptRuntimeError(command_name(command), exc)
        telemetry.record_event(
            "command.raised",
            level="error",
            data={"command": failure.command, "error": repr(exc)},
        )
        return res_error(str(exc) or type(exc).__name__)
    return coerce(outcome, command)


def coerce(outcome: object, command: object = None) -> Result:
    if isinstance(outcome, Result):
        return outcome
    if outcome is None:
        return OK
    return res_error(
        f"{command_name(command)} returned {type(outcome).__name__}, not a result"
    )


__all__ = [
    "Command",
    "Result",
    "OK",
    "NOOP",
    "res_ok",
    "res_noop",
    "res_error",
    "from_flag",
    "is_ok",
    "is_error",
    "is_noop",
    "invoke",
    "coerce",
]
