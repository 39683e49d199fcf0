"""Command outcomes, combinators and the reusable host commands."""

from .combinators import run_all, run_first
from .core import context_command, context_factory, noop
from .editing import paste_after, paste_before, vim_change, vim_delete, vim_yank
from .prompt import cancel_auxline, finish_auxline
from .result import (
    NOOP,
    OK,
    Command,
    Result,
    invoke,
    is_error,
    is_noop,
    is_ok,
    res_error,
    res_noop,
    res_ok,
)

__all__ = [
    "Command",
    "Result",
    "OK",
    "NOOP",
    "invoke",
    "is_error",
    "is_noop",
    "is_ok",
    "res_error",
    "res_noop",
    "res_ok",
    "run_all",
    "run_first",
    "context_command",
    "context_factory",
    "noop",
    "paste_after",
    "paste_before",
    "vim_change",
    "vim_delete",
    "vim_yank",
    "cancel_auxline",
    "finish_auxline",
]
