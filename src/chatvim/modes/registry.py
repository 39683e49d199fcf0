"""Named modes forming a forest through parent references."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Dict, Iterator, Literal, Mapping, Optional

from chatvim.errors import ModeDefinitionError, ModeNotFound
from chatvim.runtime.telemetry import record_event

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.actions.result import Command

InputTarget = Literal["buffer", "auxline"]

BASE_MODE = "normal"

# name -> input target of the host-provided root modes
BUILTIN_MODES: Mapping[str, Optional[InputTarget]] = {
    "normal": None,
    "insert": "buffer",
    "command": "auxline",
    "roomfilter": "auxline",
    "roomfilterunread": "auxline",
}


@dataclass(slots=True)
class Mode:
    """Mode metadata; bindings live in the keymap registry."""

    name: str
    parent: Optional[str] = None
    input_target: Optional[InputTarget] = None
    on_enter: Optional["Command"] = None
    on_leave: Optional["Command"] = None
    builtin: bool = False


ModeSnapshot = Mapping[str, Mode]


class ModeRegistry:
    """Flat name-indexed store; parents are names, never object references."""

    def __init__(self, *, builtins: bool = True) -> None:
        self._modes: Dict[str, Mode] = {}
        if builtins:
            for name, target in BUILTIN_MODES.items():
                self._modes[name] = Mode(name=name, input_target=target, builtin=True)

    def __contains__(self, name: object) -> bool:
        return name in self._modes

    def __iter__(self) -> Iterator[Mode]:
        return iter(self._modes.values())

    def names(self) -> tuple[str, ...]:
        return tuple(self._modes)

    def get(self, name: str) -> Mode:
        try:
            return self._modes[name]
        except KeyError:
            raise ModeNotFound(name) from None

    def define_mode(
        self,
        name: str,
        parent: Optional[str] = None,
        *,
        input_target: Optional[InputTarget] = None,
    ) -> Mode:
        """Register ``name`` below ``parent``.

        Redefining a mode with the same parent is a no-op; moving it to
        another parent is refused.
        """

        if not isinstance(name, str) or not name:
            raise ModeDefinitionError(f"Mode name must be a non-empty string, got {name!r}")
        if parent is not None and parent not in self._modes:
            raise ModeNotFound(parent)
        existing = self._modes.get(name)
        if existing is not None:
            if existing.parent != parent:
                raise ModeDefinitionError(
                    f"Mode '{name}' is already defined with parent '{existing.parent}'"
                )
            return existing
        mode = Mode(name=name, parent=parent, input_target=input_target)
        self._modes[name] = mode
        try:
            self.chain(name)
        except ModeDefinitionError:
            del self._modes[name]
            raise
        record_event("mode.define", level="debug", data={"mode": name, "parent": parent})
        return mode

    def chain(self, name: str) -> tuple[str, ...]:
        """``name`` followed by its ancestors, most specific first."""

        seen: list[str] = []
        current: Optional[str] = name
        while current is not None:
            if current in seen:
                raise ModeDefinitionError(
                    f"Mode parent cycle: {' -> '.join(seen + [current])}"
                )
            seen.append(current)
            current = self.get(current).parent
        return tuple(seen)

    def input_target(self, name: str) -> Optional[InputTarget]:
        for mode_name in self.chain(name):
            target = self._modes[mode_name].input_target
            if target is not None:
                return target
        return None

    def set_on_enter(self, name: str, command: Optional["Command"]) -> None:
        self.get(name).on_enter = command

    def set_on_leave(self, name: str, command: Optional["Command"]) -> None:
        self.get(name).on_leave = command

    def snapshot(self) -> ModeSnapshot:
        return {name: replace(mode) for name, mode in self._modes.items()}

    def restore(self, snapshot: ModeSnapshot) -> None:
        self._modes = {name: replace(mode) for name, mode in snapshot.items()}


__all__ = [
    "BASE_MODE",
    "BUILTIN_MODES",
    "InputTarget",
    "Mode",
    "ModeRegistry",
    "ModeSnapshot",
]
