"""Message filter expressions used by ``set_filter``.

Grammar::

    expr  := group ("|" group)*
    group := item+                 (implicit AND)
    item  := "!" item | "(" expr ")" | ["~f" | "~b"] text
    text  := word (whitespace word)* | '"' escaped '"'

``~f`` matches the sender, ``~b`` (the default) the body, both as
case-sensitive substrings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from chatvim.errors import CommandError

from .model import Message

_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}
_TEXT_STOP = set('~()"') | {" ", "\t", "\n"}
_WHITESPACE = (" ", "\t", "\n")


class FilterSyntaxError(CommandError):
    """Raised for filter expressions that cannot be parsed."""


@dataclass(frozen=True, slots=True)
class SenderFilter:
    needle: str

    def matches(self, message: Message) -> bool:
        return self.needle in message.sender


@dataclass(frozen=True, slots=True)
class BodyFilter:
    needle: str

    def matches(self, message: Message) -> bool:
        return self.needle in message.body


@dataclass(frozen=True, slots=True)
class NotFilter:
    inner: "Filter"

    def matches(self, message: Message) -> bool:
        return not self.inner.matches(message)


@dataclass(frozen=True, slots=True)
class AndFilter:
    items: Tuple["Filter", ...]

    def matches(self, message: Message) -> bool:
        return all(item.matches(message) for item in self.items)


@dataclass(frozen=True, slots=True)
class OrFilter:
    items: Tuple["Filter", ...]

    def matches(self, message: Message) -> bool:
        return any(item.matches(message) for item in self.items)


Filter = Union[SenderFilter, BodyFilter, NotFilter, AndFilter, OrFilter]

# (kind, value): kind is one of "(", ")", "|", "!", "type", "text", "space"
Token = Tuple[str, str]


def tokenize(source: str) -> List[Token]:
    tokens: List[Token] = []
    index = 0
    while index < len(source):
        char = source[index]
        if char in "()|!":
            tokens.append((char, char))
            index += 1
        elif char == "~":
            if index + 1 >= len(source):
                raise FilterSyntaxError(f"Unfinished filter type: {source[index:]}")
            tokens.append(("type", source[index + 1]))
            index += 2
        elif char == '"':
            text, index = _read_string(source, index)
            tokens.append(("text", text))
        elif char in _WHITESPACE:
            start = index
            while index < len(source) and source[index] in _WHITESPACE:
                index += 1
            tokens.append(("space", source[start:index]))
        else:
            start = index
            while index < len(source) and source[index] not in _TEXT_STOP:
                index += 1
            tokens.append(("text", source[start:index]))
    return tokens


def _read_string(source: str, start: int) -> Tuple[str, int]:
    out: List[str] = []
    index = start + 1
    while index < len(source):
        char = source[index]
        if char == '"':
            return "".join(out), index + 1
        if char == "\\":
            if index + 1 >= len(source):
                break
            escaped = _ESCAPES.get(source[index + 1])
            if escaped is None:
                raise FilterSyntaxError(
                    f"Invalid escape expression: {source[index:index + 2]}"
                )
            out.append(escaped)
            index += 2
            continue
        out.append(char)
        index += 1
    raise FilterSyntaxError(f"Unfinished string: {source[start:]}")


class _Parser:
    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens = tokens
        self.position = 0

    def peek(self) -> Optional[str]:
        if self.position < len(self.tokens):
            return self.tokens[self.position][0]
        return None

    def take(self) -> Token:
        token = self.tokens[self.position]
        self.position += 1
        return token

    def skip_whitespace(self) -> None:
        while self.peek() == "space":
            self.position += 1

    def parse_or(self) -> Filter:
        items = [self.parse_and()]
        while self.peek() == "|":
            self.take()
            items.append(self.parse_and())
        return items[0] if len(items) == 1 else OrFilter(tuple(items))

    def parse_and(self) -> Filter:
        items: List[Filter] = []
        while True:
            self.skip_whitespace()
            kind = self.peek()
            if kind in ("type", "text"):
                items.append(self.parse_item())
            elif kind == "(":
                items.append(self.parse_group())
            elif kind == "!":
                self.take()
                self.skip_whitespace()
                if self.peek() == "(":
                    items.append(NotFilter(self.parse_group()))
                else:
                    items.append(NotFilter(self.parse_item()))
            else:
                break
        if not items:
            raise FilterSyntaxError("Need at least one filter")
        return items[0] if len(items) == 1 else AndFilter(tuple(items))

    def parse_group(self) -> Filter:
        self.take()
        inner = self.parse_or()
        if self.peek() != ")":
            raise FilterSyntaxError("Parenthesis not closed")
        self.take()
        return inner

    def parse_item(self) -> Filter:
        kind_filter = "b"
        if self.peek() == "type":
            kind_filter = self.take()[1]
            self.skip_whitespace()
        if self.peek() != "text":
            raise FilterSyntaxError("Missing filter text")
        parts = [self.take()[1]]
        pending_space = ""
        while self.peek() in ("space", "text"):
            kind, value = self.take()
            if kind == "space":
                pending_space += value
            else:
                parts.append(pending_space + value)
                pending_space = ""
        if pending_space:
            self.position -= 1
        needle = "".join(parts)
        if kind_filter == "f":
            return SenderFilter(needle)
        if kind_filter == "b":
            return BodyFilter(needle)
        raise FilterSyntaxError(f"Invalid filter type '{kind_filter}'")


def parse_filter(source: str) -> Filter:
    """Parse a filter expression, raising :class:`FilterSyntaxError`."""

    parser = _Parser(tokenize(source))
    result = parser.parse_or()
    parser.skip_whitespace()
    if parser.peek() is not None:
        raise FilterSyntaxError(f"Unexpected '{parser.tokens[parser.position][1]}'")
    return result


__all__ = [
    "AndFilter",
    "BodyFilter",
    "Filter",
    "FilterSyntaxError",
    "NotFilter",
    "OrFilter",
    "SenderFilter",
    "parse_filter",
    "tokenize",
]
