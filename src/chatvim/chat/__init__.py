"""Chat state model, backend boundary and the in-memory backend."""

from .backend import (
    BackendEvent,
    BackendFailure,
    ChatBackend,
    HistoryLoaded,
    MessageEdited,
    MessageReceived,
    ReactionAdded,
    RoomUpdated,
    apply_event,
)
from .local import LocalBackend
from .model import ChatState, Message, Room, RoomSelectionHistory, SpecialMessage
from .search import FilterSyntaxError, parse_filter

__all__ = [
    "BackendEvent",
    "BackendFailure",
    "ChatBackend",
    "HistoryLoaded",
    "MessageEdited",
    "MessageReceived",
    "ReactionAdded",
    "RoomUpdated",
    "apply_event",
    "LocalBackend",
    "ChatState",
    "Message",
    "Room",
    "RoomSelectionHistory",
    "SpecialMessage",
    "FilterSyntaxError",
    "parse_filter",
]
