"""Keymap registry storing one command per (mode, sequence) slot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional

from chatvim.runtime.telemetry import record_event, span

from .models import Binding, KeySequence

RegistrySnapshot = Mapping[str, Mapping[tuple[str, ...], Binding]]


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    binding_count: int
    modes: tuple[str, ...]


class KeymapRegistry:
    """Owns binding metadata; later registrations overwrite earlier ones."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._bindings: Dict[str, Dict[tuple[str, ...], Binding]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def register_binding(self, binding: Binding) -> Optional[Binding]:
        """Store ``binding``, returning the binding it replaced if any."""

        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": binding.mode, "sequence": binding.key_signature},
        ):
            slots = self._bindings.setdefault(binding.mode, {})
            previous = slots.get(binding.sequence.tokens)
            slots[binding.sequence.tokens] = binding
            if previous is not None:
                record_event(
                    "keymaps.overwrite",
                    level="debug",
                    data={
                        "mode": binding.mode,
                        "sequence": binding.key_signature,
                        "previous_source": previous.source,
                        "source": binding.source,
                    },
                    logger_name=self._logger_name,
                )
            self._touch_bindings()
            return previous

    def unregister_binding(self, mode: str, sequence: KeySequence) -> Optional[Binding]:
        with span(
            "keymaps::unregister_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "sequence": sequence.notation},
        ):
            slots = self._bindings.get(mode)
            if not slots:
                return None
            binding = slots.pop(sequence.tokens, None)
            if binding is None:
                return None
            if not slots:
                self._bindings.pop(mode, None)
            self._touch_bindings()
            return binding

    def clear(self, mode: Optional[str] = None) -> int:
        if mode is None:
            removed = sum(len(slots) for slots in self._bindings.values())
            self._bindings.clear()
        else:
            removed = len(self._bindings.pop(mode, {}))
        if removed:
            self._touch_bindings()
        return removed

    def get_binding(self, mode: str, sequence: KeySequence) -> Optional[Binding]:
        return self._bindings.get(mode, {}).get(sequence.tokens)

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            for slots in self._bindings.values():
                yield from slots.values()
            return
        yield from self._bindings.get(mode, {}).values()

    def stats(self) -> RegistryStats:
        return RegistryStats(
            binding_count=sum(len(slots) for slots in self._bindings.values()),
            modes=tuple(sorted(self._bindings)),
        )

    def snapshot(self) -> RegistrySnapshot:
        return {mode: dict(slots) for mode, slots in self._bindings.items()}

    def restore(self, snapshot: RegistrySnapshot) -> None:
        self._bindings = {mode: dict(slots) for mode, slots in snapshot.items()}
        self._touch_bindings()

    def _touch_bindings(self) -> None:
        self._revision += 1


__all__ = [
    "KeymapRegistry",
    "RegistrySnapshot",
    "RegistryStats",
]
