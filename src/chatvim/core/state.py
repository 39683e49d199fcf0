"""Explicit engine state threaded through every dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from chatvim.buffer import AuxiliaryInputLine, AuxlineView, BufferView, ClipboardRegister, TextBuffer
from chatvim.chat import ChatState, SpecialMessage
from chatvim.keymaps import KeymapRegistry
from chatvim.modes import ModeRegistry, ModeStack
from chatvim.runtime.config import ClientSettings, EngineOptions


@dataclass(slots=True)
class EngineState:
    """Everything commands may read or mutate, built once at startup."""

    modes: ModeRegistry
    keymaps: KeymapRegistry
    stack: ModeStack
    buffer: TextBuffer = field(default_factory=TextBuffer)
    auxline: AuxiliaryInputLine = field(default_factory=AuxiliaryInputLine)
    clipboard: ClipboardRegister = field(default_factory=ClipboardRegister)
    chat: ChatState = field(default_factory=ChatState)
    settings: ClientSettings = field(default_factory=ClientSettings)
    error_message: Optional[str] = None
    running: bool = True

    @classmethod
    def create(cls, options: Optional[EngineOptions] = None) -> "EngineState":
        options = options or EngineOptions()
        modes = ModeRegistry()
        stack = ModeStack(
            modes,
            base_mode=options.base_mode,
            switch_runs_enter_hooks=options.switch_runs_enter_hooks,
        )
        return cls(
            modes=modes,
            keymaps=KeymapRegistry(logger_name="chatvim.keymaps"),
            stack=stack,
        )

    def set_error(self, message: str) -> None:
        self.error_message = message

    def clear_error(self) -> bool:
        if self.error_message is None:
            return False
        self.error_message = None
        return True


@dataclass(frozen=True, slots=True)
class EngineView:
    """Read-only frame data pulled by renderers."""

    mode: str
    mode_stack: tuple[str, ...]
    pending_keys: tuple[str, ...]
    buffer: BufferView
    auxline: AuxlineView
    error_message: Optional[str]
    room_id: Optional[str]
    room_name: Optional[str]
    rooms: tuple[tuple[str, str, int], ...]
    messages: tuple[tuple[str, str, str], ...]
    selected_message: Optional[str]
    special: Optional[SpecialMessage]
    running: bool


__all__ = ["EngineState", "EngineView"]
