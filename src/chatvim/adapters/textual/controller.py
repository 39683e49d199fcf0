"""Textual adapter: turns Textual key events into chords and pushes frames."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from chatvim.core import Engine, EngineView
from chatvim.errors import KeySequenceError
from chatvim.keymaps import KeyChord
from chatvim.modes import DispatchResult


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


_TEXTUAL_NAMES = {
    "enter": "Return",
    "return": "Return",
    "escape": "Esc",
    "backspace": "Backspace",
    "delete": "Delete",
    "tab": "Tab",
    "space": "Space",
    "left": "Left",
    "right": "Right",
    "up": "Up",
    "down": "Down",
    "home": "Home",
    "end": "End",
    "pageup": "PgUp",
    "pagedown": "PgDown",
    "insert": "Insert",
}
_TEXTUAL_MODIFIERS = {"ctrl": "C", "control": "C", "alt": "A", "meta": "A", "shift": "S"}


def chord_from_textual(key: str, character: Optional[str] = None) -> Optional[KeyChord]:
    """Translate a Textual key name (``"ctrl+n"``, ``"enter"``) into a chord.

    Returns ``None`` for keys the engine has no notation for.
    """

    *prefixes, name = key.split("+")
    modifiers = tuple(_TEXTUAL_MODIFIERS[p] for p in prefixes if p in _TEXTUAL_MODIFIERS)
    if name in _TEXTUAL_NAMES:
        return KeyChord(_TEXTUAL_NAMES[name], modifiers)
    typed = character is not None and len(character) == 1 and character.isprintable()
    if typed and not {"C", "A"} & set(modifiers):
        return KeyChord(character)  # type: ignore[arg-type]
    if len(name) == 1:
        try:
            return KeyChord(name, modifiers)
        except KeySequenceError:
            return None
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    render: Callable[[EngineView], None]
    update_status: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


class TextualChatAdapter:
    """Feeds Textual key events to an :class:`Engine` and renders snapshots."""

    def __init__(self, engine: Engine, hooks: TextualUIHooks) -> None:
        self.engine = engine
        self.hooks = hooks
        self._refresh()

    def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> Optional[DispatchResult]:
        chord = chord_from_textual(key, character)
        if chord is None:
            self._log_state("ignored ->", key=key)
            return None
        self._log_state("key ->", chord=chord.token)
        self.engine.process_events()
        result = self.engine.handle_key(chord)
        self._refresh()
        self._log_state(
            "result <-",
            status=result.status,
            result=result.result,
            binding=result.binding.key_signature if result.binding else None,
        )
        return result

    def process_events(self) -> int:
        """Apply queued backend completions and redraw when any arrived."""

        count = self.engine.process_events()
        if count:
            self._refresh()
        return count

    @property
    def running(self) -> bool:
        return self.engine.state.running

    def _refresh(self) -> None:
        view = self.engine.snapshot()
        self.hooks.render(view)
        self.hooks.update_status(status_line(view))

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        state = self.engine.state
        return {
            "mode": state.stack.top,
            "pending": "".join(self.engine.dispatcher.pending),
            "cursor": state.buffer.cursor,
            "buffer_version": state.buffer.version,
        }


def status_line(view: EngineView) -> str:
    if view.error_message:
        return view.error_message
    parts = [f"-- {view.mode.upper()} --"]
    if view.room_name:
        parts.append(f"#{view.room_name}")
    if view.special is not None:
        parts.append(f"[{view.special.kind}]")
    if view.pending_keys:
        parts.append("".join(view.pending_keys))
    return " ".join(parts)


__all__ = ["TextualChatAdapter", "TextualUIHooks", "chord_from_textual", "status_line"]
