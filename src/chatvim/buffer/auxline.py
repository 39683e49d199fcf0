"""Single-line prompt field used by command-style modes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True, slots=True)
class AuxlineView:
    tag: Optional[str]
    prompt: str
    content: str
    cursor: int
    submitted: bool


class AuxiliaryInputLine:
    """Prompt, content and owning tag of the auxiliary line.

    ``accept`` marks the content as submitted and files it in the history of
    the current tag; :meth:`history_prev` and :meth:`history_next` walk that
    history the way a shell does.
    """

    def __init__(self) -> None:
        self.tag: Optional[str] = None
        self.prompt = ""
        self._content = ""
        self._cursor = 0
        self.submitted = False
        self._history: Dict[str, List[str]] = {}
        self._history_index: Optional[int] = None

    @property
    def content(self) -> str:
        return self._content

    @property
    def cursor(self) -> int:
        return self._cursor

    def snapshot(self) -> AuxlineView:
        return AuxlineView(
            tag=self.tag,
            prompt=self.prompt,
            content=self._content,
            cursor=self._cursor,
            submitted=self.submitted,
        )

    def switch(self, tag: str) -> None:
        self.tag = tag
        self._reset("")

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def set_content(self, content: str) -> None:
        self._content = content
        self._cursor = len(content)
        self.submitted = False

    def accept(self) -> bool:
        if self.submitted:
            return False
        self.submitted = True
        if self._content and self.tag is not None:
            entries = self._history.setdefault(self.tag, [])
            if not entries or entries[-1] != self._content:
                entries.append(self._content)
        self._history_index = None
        return True

    def clear(self) -> bool:
        changed = bool(self._content) or self.submitted
        self._reset("")
        return changed

    # editing -----------------------------------------------------------

    def insert(self, text: str) -> bool:
        text = text.replace("\n", " ")
        if not text:
            return False
        self._content = self._content[: self._cursor] + text + self._content[self._cursor :]
        self._cursor += len(text)
        self.submitted = False
        return True

    def delete_left(self) -> bool:
        if self._cursor == 0:
            return False
        self._content = self._content[: self._cursor - 1] + self._content[self._cursor :]
        self._cursor -= 1
        self.submitted = False
        return True

    def delete_right(self) -> bool:
        if self._cursor >= len(self._content):
            return False
        self._content = self._content[: self._cursor] + self._content[self._cursor + 1 :]
        self.submitted = False
        return True

    def move(self, delta: int) -> bool:
        target = min(max(self._cursor + delta, 0), len(self._content))
        moved = target != self._cursor
        self._cursor = target
        return moved

    def home(self) -> bool:
        return self.move(-self._cursor)

    def end(self) -> bool:
        return self.move(len(self._content) - self._cursor)

    # history -----------------------------------------------------------

    def history(self, tag: Optional[str] = None) -> tuple[str, ...]:
        key = self.tag if tag is None else tag
        if key is None:
            return ()
        return tuple(self._history.get(key, ()))

    def history_prev(self) -> bool:
        entries = self.history()
        if not entries:
            return False
        if self._history_index is None:
            index = len(entries) - 1
        elif self._history_index == 0:
            return False
        else:
            index = self._history_index - 1
        self._history_index = index
        self.set_content(entries[index])
        return True

    def history_next(self) -> bool:
        entries = self.history()
        if self._history_index is None:
            return False
        index = self._history_index + 1
        if index >= len(entries):
            self._history_index = None
            self.set_content("")
            return True
        self._history_index = index
        self.set_content(entries[index])
        return True

    def _reset(self, content: str) -> None:
        self._content = content
        self._cursor = len(content)
        self.submitted = False
        self._history_index = None


__all__ = ["AuxiliaryInputLine", "AuxlineView"]
