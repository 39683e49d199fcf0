"""Key chords, key sequences in vim notation, and bindings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

from chatvim.errors import KeySequenceError

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.actions.result import Command

_MODIFIER_ALIASES = {"C": "C", "A": "A", "M": "A", "S": "S"}

NAMED_KEYS = (
    "Return",
    "Esc",
    "Backspace",
    "Delete",
    "Tab",
    "Space",
    "Left",
    "Right",
    "Up",
    "Down",
    "Home",
    "End",
    "PgUp",
    "PgDown",
    "Insert",
)

_NAME_LOOKUP = {name.lower(): name for name in NAMED_KEYS}
_NAME_LOOKUP.update(
    {
        "cr": "Return",
        "enter": "Return",
        "escape": "Esc",
        "bs": "Backspace",
        "del": "Delete",
        "pageup": "PgUp",
        "pagedown": "PgDown",
        "ins": "Insert",
    }
)
_LITERAL_NAMES = {"lt": "<", "bar": "|", "bslash": "\\"}
_CONTROL_ALIASES = {"m": "Return", "i": "Tab", "[": "Esc"}


def _normalize_modifiers(modifiers: Iterable[str]) -> tuple[str, ...]:
    normalized: list[str] = []
    for modifier in modifiers:
        cleaned = modifier.strip().upper()
        if not cleaned:
            continue
        if cleaned in {"CTRL", "CONTROL"}:
            cleaned = "C"
        elif cleaned in {"ALT", "META"}:
            cleaned = "A"
        elif cleaned == "SHIFT":
            cleaned = "S"
        if cleaned not in _MODIFIER_ALIASES:
            raise KeySequenceError(f"Unknown modifier '{modifier}'")
        normalized.append(_MODIFIER_ALIASES[cleaned])
    return tuple(sorted(dict.fromkeys(normalized)))


@dataclass(frozen=True, slots=True)
class KeyChord:
    """One logical key press: a character or a named key plus modifiers.

    Chords are canonical, so equal presses compare equal however they were
    spelled: ``<C-m>`` is ``<Return>`` and ``<S-a>`` is ``A``.
    """

    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise KeySequenceError("key cannot be empty")
        key = self.key
        modifiers = _normalize_modifiers(self.modifiers)
        if len(key) > 1:
            named = _NAME_LOOKUP.get(key.lower())
            if named is None:
                raise KeySequenceError(f"Unknown key '{key}'")
            key = named
        elif key == " ":
            key = "Space"
        if len(key) == 1:
            if "S" in modifiers:
                key = key.upper()
                modifiers = tuple(m for m in modifiers if m != "S")
            if "C" in modifiers:
                key = key.lower()
                if modifiers == ("C",) and key in _CONTROL_ALIASES:
                    key = _CONTROL_ALIASES[key]
                    modifiers = ()
        object.__setattr__(self, "key", key)
        object.__setattr__(self, "modifiers", modifiers)

    @property
    def named(self) -> bool:
        return len(self.key) > 1

    @property
    def token(self) -> str:
        if not self.modifiers and not self.named:
            return "<lt>" if self.key == "<" else self.key
        key = "lt" if self.key == "<" else self.key
        return "<" + "-".join(self.modifiers + (key,)) + ">"

    @property
    def text(self) -> Optional[str]:
        """Literal text the chord types when it is not bound."""

        if self.modifiers:
            return None
        if self.key == "Space":
            return " "
        return None if self.named else self.key

    @classmethod
    def parse(cls, notation: str) -> "KeyChord":
        sequence = KeySequence.parse(notation)
        if len(sequence) != 1:
            raise KeySequenceError(f"'{notation}' is not a single key")
        return sequence.chords[0]

    def __str__(self) -> str:
        return self.token


def _parse_special(inner: str) -> KeyChord:
    modifiers: list[str] = []
    rest = inner
    while len(rest) > 2 and rest[1] == "-":
        modifiers.append(rest[0])
        rest = rest[2:]
    if len(rest) > 1:
        rest = _LITERAL_NAMES.get(rest.lower(), rest)
    return KeyChord(rest, tuple(modifiers))


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Immutable, non-empty tuple of chords."""

    chords: tuple[KeyChord, ...]

    def __post_init__(self) -> None:
        if not self.chords:
            raise KeySequenceError("KeySequence requires at least one chord")

    def __len__(self) -> int:
        return len(self.chords)

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(chord.token for chord in self.chords)

    @property
    def notation(self) -> str:
        return "".join(self.tokens)

    def __str__(self) -> str:
        return self.notation

    @classmethod
    def of(cls, *chords: KeyChord) -> "KeySequence":
        return cls(tuple(chords))

    @classmethod
    def parse(cls, notation: str) -> "KeySequence":
        """Parse vim key notation such as ``"gg"``, ``"<C-n>"`` or ``"d<Left>"``.

        A ``<`` that does not open a ``<...>`` group is taken literally;
        ``<lt>`` always is.
        """

        if not isinstance(notation, str):
            raise KeySequenceError(f"Key sequence must be a string, got {notation!r}")
        chords: list[KeyChord] = []
        index = 0
        while index < len(notation):
            char = notation[index]
            if char == "<":
                close = notation.find(">", index + 1)
                inner = notation[index + 1 : close] if close > 0 else ""
                if inner and "<" not in inner and not any(c.isspace() for c in inner):
                    try:
                        chords.append(_parse_special(inner))
                    except KeySequenceError as exc:
                        raise KeySequenceError(
                            f"Invalid key '<{inner}>' in '{notation}': {exc}"
                        ) from None
                    index = close + 1
                    continue
            chords.append(KeyChord(char))
            index += 1
        if not chords:
            raise KeySequenceError("Key sequence cannot be empty")
        return cls(tuple(chords))


@dataclass(frozen=True, slots=True)
class Binding:
    """Associates a key sequence in one mode with a command."""

    mode: str
    sequence: KeySequence
    command: "Command"
    source: str = "host"
    description: str = ""

    def __post_init__(self) -> None:
        if not self.mode:
            raise ValueError("binding mode cannot be empty")
        if not callable(self.command):
            raise TypeError(f"Binding for '{self.sequence}' is not callable")

    @property
    def key_signature(self) -> str:
        return self.sequence.notation


__all__ = [
    "NAMED_KEYS",
    "KeyChord",
    "KeySequence",
    "Binding",
]
