"""Engine state, the per-command context and the dispatch loop."""

from .context import CommandContext
from .engine import Engine
from .state import EngineState, EngineView

__all__ = ["CommandContext", "Engine", "EngineState", "EngineView"]
