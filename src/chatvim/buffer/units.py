"""Semantic text units and the boundary functions computed over them.

Boundaries are pure functions of ``(text, offset)``; nothing here is stored
on the buffer. Word and WORD ends are exclusive offsets, so moving to the
``word_end`` of ``"hello world"`` from offset 0 lands on 5.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Literal, Tuple

Direction = Literal["forward", "backward"]
Classifier = Callable[[str], int]
Boundary = Callable[[str, int], int]

_WHITESPACE = 0
_SENTENCE_END = ".!?"
_SENTENCE_CLOSERS = ")]\"'"


def word_class(char: str) -> int:
    """vim ``iskeyword``-style classes: whitespace, word, punctuation."""

    if char.isspace():
        return _WHITESPACE
    if char.isalnum() or char == "_":
        return 1
    return 2


def big_word_class(char: str) -> int:
    return _WHITESPACE if char.isspace() else 1


def _forward_begin(classify: Classifier) -> Boundary:
    def boundary(text: str, offset: int) -> int:
        end = len(text)
        index = offset
        if index >= end:
            return end
        current = classify(text[index])
        if current != _WHITESPACE:
            while index < end and classify(text[index]) == current:
                index += 1
        while index < end and classify(text[index]) == _WHITESPACE:
            index += 1
        return index

    return boundary


def _backward_begin(classify: Classifier) -> Boundary:
    def boundary(text: str, offset: int) -> int:
        index = offset
        while index > 0 and classify(text[index - 1]) == _WHITESPACE:
            index -= 1
        if index == 0:
            return 0
        current = classify(text[index - 1])
        while index > 0 and classify(text[index - 1]) == current:
            index -= 1
        return index

    return boundary


def _forward_end(classify: Classifier) -> Boundary:
    def boundary(text: str, offset: int) -> int:
        end = len(text)
        index = offset
        while index < end and classify(text[index]) == _WHITESPACE:
            index += 1
        if index >= end:
            return end
        current = classify(text[index])
        while index < end and classify(text[index]) == current:
            index += 1
        return index

    return boundary


def _backward_end(classify: Classifier) -> Boundary:
    def boundary(text: str, offset: int) -> int:
        index = offset
        if index > 0 and classify(text[index - 1]) != _WHITESPACE:
            current = classify(text[index - 1])
            while index > 0 and classify(text[index - 1]) == current:
                index -= 1
        while index > 0 and classify(text[index - 1]) == _WHITESPACE:
            index -= 1
        return index

    return boundary


def sentence_starts(text: str) -> list[int]:
    """Offsets where sentences begin.

    A sentence ends at ``.``, ``!`` or ``?`` (optionally followed by closing
    brackets or quotes) when whitespace or the end of the text follows.
    """

    starts = [0]
    end = len(text)
    index = 0
    while index < end:
        if text[index] in _SENTENCE_END:
            probe = index + 1
            while probe < end and text[probe] in _SENTENCE_CLOSERS:
                probe += 1
            if probe >= end:
                break
            if text[probe].isspace():
                while probe < end and text[probe].isspace():
                    probe += 1
                if probe < end:
                    starts.append(probe)
                index = probe
                continue
        index += 1
    return starts


def _sentence_forward(text: str, offset: int) -> int:
    for start in sentence_starts(text):
        if start > offset:
            return start
    return len(text)


def _sentence_backward(text: str, offset: int) -> int:
    previous = 0
    for start in sentence_starts(text):
        if start >= offset:
            break
        previous = start
    return previous


def _line_forward(text: str, offset: int) -> int:
    found = text.find("\n", offset)
    return len(text) if found < 0 else found


def _line_backward(text: str, offset: int) -> int:
    return text.rfind("\n", 0, offset) + 1


_BOUNDARIES: Dict[str, Tuple[Boundary, Boundary]] = {
    "cell": (
        lambda text, offset: min(offset + 1, len(text)),
        lambda text, offset: max(offset - 1, 0),
    ),
    "line_separator": (_line_forward, _line_backward),
    "word_begin": (_forward_begin(word_class), _backward_begin(word_class)),
    "word_end": (_forward_end(word_class), _backward_end(word_class)),
    "WORD_begin": (_forward_begin(big_word_class), _backward_begin(big_word_class)),
    "WORD_end": (_forward_end(big_word_class), _backward_end(big_word_class)),
    "sentence": (_sentence_forward, _sentence_backward),
    "document_boundary": (lambda text, offset: len(text), lambda text, offset: 0),
}

UNITS: Tuple[str, ...] = tuple(_BOUNDARIES)


def is_unit(name: object) -> bool:
    return isinstance(name, str) and name in _BOUNDARIES


def boundary(text: str, offset: int, unit: str, direction: Direction) -> int:
    """Offset of the next ``unit`` boundary from ``offset`` in ``direction``."""

    try:
        forward, backward = _BOUNDARIES[unit]
    except KeyError:
        raise ValueError(
            f"'{unit}' is not a text unit (expected one of {', '.join(UNITS)})"
        ) from None
    if direction == "forward":
        return forward(text, offset)
    if direction == "backward":
        return backward(text, offset)
    raise ValueError(f"'{direction}' is not a direction")


@dataclass(frozen=True, slots=True)
class Motion:
    """A unit paired with an explicit direction, usable as a range endpoint."""

    unit: str
    direction: Direction

    def __post_init__(self) -> None:
        if not is_unit(self.unit):
            raise ValueError(f"'{self.unit}' is not a text unit")
        if self.direction not in ("forward", "backward"):
            raise ValueError(f"'{self.direction}' is not a direction")

    def target(self, text: str, offset: int) -> int:
        return boundary(text, offset, self.unit, self.direction)


def forward(unit: str) -> Motion:
    return Motion(unit, "forward")


def backward(unit: str) -> Motion:
    return Motion(unit, "backward")


__all__ = [
    "UNITS",
    "Motion",
    "boundary",
    "backward",
    "forward",
    "is_unit",
    "sentence_starts",
    "word_class",
    "big_word_class",
]
