"""Mode registry, activation stack and key dispatch."""

from .dispatcher import DispatchResult, KeyDispatcher
from .registry import BASE_MODE, BUILTIN_MODES, InputTarget, Mode, ModeRegistry
from .stack import ModeStack

__all__ = [
    "BASE_MODE",
    "BUILTIN_MODES",
    "DispatchResult",
    "InputTarget",
    "KeyDispatcher",
    "Mode",
    "ModeRegistry",
    "ModeStack",
]
