"""Rooms, messages and the selection state commands operate on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Literal, Optional

from chatvim.errors import CommandError

if TYPE_CHECKING:  # pragma: no cover
    from .search import Filter


@dataclass(slots=True)
class Message:
    id: str
    sender: str
    body: str
    timestamp: float = 0.0
    reply_to: Optional[str] = None
    attachment: Optional[str] = None
    reactions: Dict[str, List[str]] = field(default_factory=dict)
    edited: bool = False


@dataclass(frozen=True, slots=True)
class SpecialMessage:
    """The pending reply or edit target of the composition buffer."""

    kind: Literal["reply", "edit"]
    room_id: str
    message_id: str


@dataclass(slots=True)
class Room:
    id: str
    name: str
    messages: List[Message] = field(default_factory=list)
    unread: int = 0
    selected: Optional[str] = None
    filter: Optional["Filter"] = None
    filter_text: str = ""

    def has_unread(self) -> bool:
        return self.unread > 0

    def message(self, message_id: str) -> Optional[Message]:
        for message in self.messages:
            if message.id == message_id:
                return message
        return None

    def visible(self) -> List[Message]:
        if self.filter is None:
            return list(self.messages)
        return [message for message in self.messages if self.filter.matches(message)]

    def selected_message(self) -> Optional[Message]:
        if self.selected is None:
            return None
        return self.message(self.selected)


class RoomSelectionHistory:
    """Rooms ordered from least to most recently selected.

    ``select`` moves a room to the newest position; ``back`` and ``forward``
    walk the history without reordering it.
    """

    def __init__(self) -> None:
        self._selections: List[str] = []
        self._current = 0

    def current(self) -> Optional[str]:
        if 0 <= self._current < len(self._selections):
            return self._selections[self._current]
        return None

    def select(self, room_id: str) -> None:
        if room_id in self._selections:
            self._selections.remove(room_id)
        self._selections.append(room_id)
        self._current = len(self._selections) - 1

    def deselect(self) -> None:
        self._current = len(self._selections)

    def back(self) -> bool:
        if self._current == 0:
            return False
        self._current -= 1
        return True

    def forward(self) -> bool:
        if self._current + 1 >= len(self._selections):
            return False
        self._current += 1
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self._selections)


def _matches_query(name: str, query: str) -> bool:
    # all-lowercase queries match case-insensitively
    if query != query.lower():
        return query in name
    return query in name.lower()


class ChatState:
    """Client-side view of rooms and timelines, owned by the engine."""

    def __init__(self) -> None:
        self.rooms: Dict[str, Room] = {}
        self.selection = RoomSelectionHistory()
        self.special: Optional[SpecialMessage] = None

    # rooms -------------------------------------------------------------

    def add_room(self, room: Room) -> Room:
        self.rooms[room.id] = room
        return room

    def room(self, room_id: str) -> Room:
        try:
            return self.rooms[room_id]
        except KeyError:
            raise CommandError(f"Unknown room '{room_id}'") from None

    @property
    def current_room(self) -> Optional[Room]:
        current = self.selection.current()
        return self.rooms.get(current) if current is not None else None

    def require_room(self) -> Room:
        room = self.current_room
        if room is None:
            raise CommandError("No current room")
        return room

    def select_room(self, room_id: str) -> bool:
        room = self.room(room_id)
        changed = self.selection.current() != room.id
        self.selection.select(room.id)
        room.unread = 0
        return changed

    def active_rooms(self, query: str = "", *, unread_only: bool = False) -> List[Room]:
        return [
            room
            for room in self.rooms.values()
            if _matches_query(room.name, query)
            and not (unread_only and not room.has_unread())
        ]

    def cycle_room(
        self, step: int, query: str = "", *, unread_only: bool = False
    ) -> bool:
        """Select the next (``step=1``) or previous (``-1``) active room, wrapping."""

        current = self.selection.current()
        if current is None:
            ordered = list(self.rooms.values())
            if not ordered:
                return False
            return self.select_room(ordered[0 if step > 0 else -1].id)
        active = self.active_rooms(query, unread_only=unread_only)
        if not active:
            return False
        ids = [room.id for room in active]
        if current in ids:
            target = ids[(ids.index(current) + step) % len(ids)]
        else:
            target = ids[0 if step > 0 else -1]
        return self.select_room(target)

    def force_selection(self, query: str = "", *, unread_only: bool = False) -> Room:
        active = self.active_rooms(query, unread_only=unread_only)
        current = self.selection.current()
        if any(room.id == current for room in active):
            return self.rooms[current]  # type: ignore[index]
        if not active:
            raise CommandError(f"No room matches '{query}'")
        self.select_room(active[0].id)
        return active[0]

    # messages ----------------------------------------------------------

    def select_prev_message(self) -> bool:
        room = self.require_room()
        visible = room.visible()
        if not visible:
            return False
        ids = [message.id for message in visible]
        if room.selected not in ids:
            room.selected = ids[-1]
            return True
        index = ids.index(room.selected)
        if index == 0:
            return False
        room.selected = ids[index - 1]
        return True

    def select_next_message(self) -> bool:
        room = self.require_room()
        if room.selected is None:
            return False
        ids = [message.id for message in room.visible()]
        if room.selected not in ids:
            room.selected = None
            return True
        index = ids.index(room.selected)
        room.selected = ids[index + 1] if index + 1 < len(ids) else None
        return True

    def deselect_message(self) -> bool:
        room = self.current_room
        if room is None or room.selected is None:
            return False
        room.selected = None
        return True

    def require_selected(self) -> Message:
        room = self.require_room()
        message = room.selected_message()
        if message is None:
            raise CommandError("No message selected")
        return message

    def follow_reply(self) -> bool:
        room = self.require_room()
        message = self.require_selected()
        if message.reply_to is None:
            raise CommandError("Selected message is not a reply")
        if room.message(message.reply_to) is None:
            raise CommandError(f"Cannot find message with id {message.reply_to}")
        room.selected = message.reply_to
        return True

    def start_special(self, kind: Literal["reply", "edit"]) -> Message:
        room = self.require_room()
        message = self.require_selected()
        self.special = SpecialMessage(kind=kind, room_id=room.id, message_id=message.id)
        return message

    def cancel_special(self) -> bool:
        if self.special is None:
            return False
        self.special = None
        return True

    # timeline events ---------------------------------------------------

    def append_message(self, room_id: str, message: Message) -> None:
        room = self.rooms.get(room_id) or self.add_room(Room(id=room_id, name=room_id))
        room.messages.append(message)
        if room.id != self.selection.current():
            room.unread += 1

    def clear_timeline(self, room_id: str) -> None:
        room = self.room(room_id)
        room.messages.clear()
        room.selected = None


__all__ = [
    "ChatState",
    "Message",
    "Room",
    "RoomSelectionHistory",
    "SpecialMessage",
]
