"""Exception taxonomy shared by the engine layers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ChatvimError(RuntimeError):
    """Base class for every error raised by the interaction core."""


class ModeNotFound(ChatvimError):
    """Raised when a mode name is referenced before it was defined."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Mode '{name}' is not defined")
        self.name = name


class ModeDefinitionError(ChatvimError):
    """Raised when a mode definition would corrupt the mode tree."""


class KeySequenceError(ChatvimError, ValueError):
    """Raised for key sequences that cannot be parsed."""


class CommandError(ChatvimError):
    """A command reporting an intentional, user-facing failure."""


class ContextExpired(ChatvimError):
    """Raised when a command context is used after its invocation ended."""


class ScriptLoadError(ChatvimError):
    """Fatal failure while evaluating a configuration script."""

    def __init__(self, message: str, *, path: Optional[Path | str] = None) -> None:
        location = f"{path}: " if path else ""
        super().__init__(f"{location}{message}")
        self.path = path


class ScriptRuntimeError(ChatvimError):
    """A script-defined command raised while it was being invoked."""

    def __init__(self, command: str, cause: BaseException) -> None:
        super().__init__(f"{command}: {cause}")
        self.command = command
        self.cause = cause


__all__ = [
    "ChatvimError",
    "ModeNotFound",
    "ModeDefinitionError",
    "KeySequenceError",
    "CommandError",
    "ContextExpired",
    "ScriptLoadError",
    "ScriptRuntimeError",
]
