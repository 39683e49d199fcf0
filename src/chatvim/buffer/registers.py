"""Clipboard register and system clipboard integration."""

from __future__ import annotations

from typing import Callable, Optional

ClipboardSink = Callable[[str], None]
ClipboardSource = Callable[[], Optional[str]]


class ClipboardRegister:
    """Single-slot register shared by yank and paste.

    Host adapters may attach a system clipboard: ``sink`` receives every
    value written, ``source`` (when it returns text) wins over the slot.
    """

    def __init__(
        self,
        *,
        sink: Optional[ClipboardSink] = None,
        source: Optional[ClipboardSource] = None,
    ) -> None:
        self._value = ""
        self._sink = sink
        self._source = source

    def get(self) -> str:
        if self._source is not None:
            external = self._source()
            if external is not None:
                return external
        return self._value

    def set(self, value: str) -> None:
        self._value = str(value)
        if self._sink is not None:
            self._sink(self._value)

    def attach(
        self,
        *,
        sink: Optional[ClipboardSink] = None,
        source: Optional[ClipboardSource] = None,
    ) -> None:
        self._sink = sink
        self._source = source


__all__ = ["ClipboardRegister"]
