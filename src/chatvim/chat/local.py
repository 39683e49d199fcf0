"""In-memory backend used by the demo app and the tests."""

from __future__ import annotations

import itertools
import shutil
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from chatvim.runtime import telemetry
from chatvim.runtime.processes import default_opener

from .backend import (
    BackendEvent,
    BackendFailure,
    EventSink,
    HistoryLoaded,
    MessageEdited,
    MessageReceived,
    ReactionAdded,
    RoomUpdated,
)
from .model import Message

Opener = Callable[[Sequence[str]], object]


class LocalBackend:
    """Echoes every operation back as a completion event.

    Rooms and their history live in memory; attachments map message ids to
    local file paths.
    """

    def __init__(
        self,
        rooms: Optional[Dict[str, str]] = None,
        *,
        opener: Opener = default_opener,
    ) -> None:
        self._post: Optional[EventSink] = None
        self.user_id = "@me:localhost"
        self._opener = opener
        self._ids = itertools.count(1)
        self._rooms = dict(rooms or {})
        self._history: Dict[str, List[Message]] = {room_id: [] for room_id in self._rooms}
        self._attachments: Dict[str, Path] = {}
        self.sent: List[BackendEvent] = []

    def attach(self, post: EventSink, *, user_id: str) -> None:
        self._post = post
        self.user_id = user_id
        for room_id, name in self._rooms.items():
            self._emit(RoomUpdated(room_id=room_id, name=name, unread=0))

    def seed(self, room_id: str, messages: Sequence[Message]) -> None:
        """Preload history served by :meth:`fetch_history`."""

        self._history.setdefault(room_id, []).extend(messages)
        for message in messages:
            if message.attachment:
                self._attachments[message.id] = Path(message.attachment)

    def send_message(
        self, room_id: str, body: str, *, reply_to: Optional[str] = None
    ) -> None:
        message = Message(
            id=self._next_id(),
            sender=self.user_id,
            body=body,
            timestamp=time.time(),
            reply_to=reply_to,
        )
        self._history.setdefault(room_id, []).append(message)
        self._emit(MessageReceived(room_id=room_id, message=message))

    def edit_message(self, room_id: str, message_id: str, body: str) -> None:
        self._emit(MessageEdited(room_id=room_id, message_id=message_id, body=body))

    def react(self, room_id: str, message_id: str, key: str) -> None:
        self._emit(
            ReactionAdded(
                room_id=room_id, message_id=message_id, key=key, sender=self.user_id
            )
        )

    def send_file(self, room_id: str, path: str) -> None:
        source = Path(path).expanduser()
        if not source.is_file():
            self._emit(BackendFailure("send_file", f"No such file: {path}"))
            return
        message = Message(
            id=self._next_id(),
            sender=self.user_id,
            body=source.name,
            timestamp=time.time(),
            attachment=str(source),
        )
        self._attachments[message.id] = source
        self._history.setdefault(room_id, []).append(message)
        self._emit(MessageReceived(room_id=room_id, message=message))

    def save_attachment(self, room_id: str, message_id: str, destination: str) -> None:
        source = self._attachments.get(message_id)
        if source is None:
            self._emit(BackendFailure("save_file", "Message has no attachment"))
            return
        try:
            shutil.copyfile(source, Path(destination).expanduser())
        except OSError as exc:
            self._emit(BackendFailure("save_file", str(exc)))

    def open_attachment(self, room_id: str, message_id: str, program: str) -> None:
        source = self._attachments.get(message_id)
        if source is None:
            self._emit(BackendFailure("open", "Message has no attachment"))
            return
        try:
            self._opener([program, str(source)])
        except OSError as exc:
            self._emit(BackendFailure("open", f"can't open file: {exc}"))

    def fetch_history(self, room_id: str) -> None:
        messages = tuple(self._history.get(room_id, ()))
        self._emit(HistoryLoaded(room_id=room_id, messages=messages))

    def _next_id(self) -> str:
        return f"$local{next(self._ids)}"

    def _emit(self, event: BackendEvent) -> None:
        self.sent.append(event)
        if self._post is None:
            telemetry.record_event(
                "backend.detached",
                level="warning",
                data={"event": type(event).__name__},
            )
            return
        self._post(event)


__all__ = ["LocalBackend"]
