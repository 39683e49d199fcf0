"""Messaging backend boundary and the completion events it posts back."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Tuple, Union, runtime_checkable

from .model import ChatState, Message, Room


@dataclass(frozen=True, slots=True)
class MessageReceived:
    room_id: str
    message: Message


@dataclass(frozen=True, slots=True)
class MessageEdited:
    room_id: str
    message_id: str
    body: str


@dataclass(frozen=True, slots=True)
class ReactionAdded:
    room_id: str
    message_id: str
    key: str
    sender: str


@dataclass(frozen=True, slots=True)
class HistoryLoaded:
    room_id: str
    messages: Tuple[Message, ...] = ()


@dataclass(frozen=True, slots=True)
class RoomUpdated:
    room_id: str
    name: str
    unread: Optional[int] = None


@dataclass(frozen=True, slots=True)
class BackendFailure:
    operation: str
    message: str
    details: dict = field(default_factory=dict)


BackendEvent = Union[
    MessageReceived,
    MessageEdited,
    ReactionAdded,
    HistoryLoaded,
    RoomUpdated,
    BackendFailure,
]

EventSink = Callable[[BackendEvent], None]


@runtime_checkable
class ChatBackend(Protocol):
    """Fire-and-forget operations; results arrive later through ``post``."""

    def attach(self, post: EventSink, *, user_id: str) -> None: ...

    def send_message(
        self, room_id: str, body: str, *, reply_to: Optional[str] = None
    ) -> None: ...

    def edit_message(self, room_id: str, message_id: str, body: str) -> None: ...

    def react(self, room_id: str, message_id: str, key: str) -> None: ...

    def send_file(self, room_id: str, path: str) -> None: ...

    def save_attachment(self, room_id: str, message_id: str, destination: str) -> None: ...

    def open_attachment(self, room_id: str, message_id: str, program: str) -> None: ...

    def fetch_history(self, room_id: str) -> None: ...


def apply_event(state: ChatState, event: BackendEvent) -> Optional[str]:
    """Fold a completion into ``state``; returns an error message for failures."""

    if isinstance(event, MessageReceived):
        state.append_message(event.room_id, event.message)
    elif isinstance(event, MessageEdited):
        room = state.rooms.get(event.room_id)
        message = room.message(event.message_id) if room else None
        if message is not None:
            message.body = event.body
            message.edited = True
    elif isinstance(event, ReactionAdded):
        room = state.rooms.get(event.room_id)
        message = room.message(event.message_id) if room else None
        if message is not None:
            senders = message.reactions.setdefault(event.key, [])
            if event.sender not in senders:
                senders.append(event.sender)
    elif isinstance(event, HistoryLoaded):
        room = state.rooms.get(event.room_id)
        if room is not None:
            known = {message.id for message in room.messages}
            older = [message for message in event.messages if message.id not in known]
            room.messages[:0] = older
    elif isinstance(event, RoomUpdated):
        room = state.rooms.get(event.room_id)
        if room is None:
            state.add_room(Room(id=event.room_id, name=event.name, unread=event.unread or 0))
        else:
            room.name = event.name
            if event.unread is not None:
                room.unread = event.unread
    elif isinstance(event, BackendFailure):
        return f"{event.operation}: {event.message}"
    else:
        raise TypeError(f"Unsupported backend event {type(event).__name__}")
    return None


__all__ = [
    "BackendEvent",
    "BackendFailure",
    "ChatBackend",
    "EventSink",
    "HistoryLoaded",
    "MessageEdited",
    "MessageReceived",
    "ReactionAdded",
    "RoomUpdated",
    "apply_event",
]
