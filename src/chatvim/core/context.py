"""Per-invocation handle through which commands touch engine state."""

from __future__ import annotations

import functools
import re
from typing import TYPE_CHECKING, Any, Callable, Dict, Literal, Optional, TypeVar

from chatvim.actions.result import NOOP, OK, Result, from_flag, res_error
from chatvim.buffer import Position
from chatvim.chat import ChatBackend, Message, Room, SpecialMessage, parse_filter
from chatvim.errors import ChatvimError, CommandError, ContextExpired

if TYPE_CHECKING:  # pragma: no cover
    from .engine import Engine
    from .state import EngineState

Exposure = Literal["command", "factory", "query"]
F = TypeVar("F", bound=Callable[..., Any])

_ROOM_FILTER_MODES = ("roomfilter", "roomfilterunread")
_URL = re.compile(r"https?://\S+")


def _operation(kind: Exposure) -> Callable[[F], F]:
    """Mark a context method as script-visible.

    ``command`` methods take no arguments and become Commands, ``factory``
    methods become Command factories, ``query`` methods return plain values.
    Failures of command and factory methods come back as ``Error`` results.
    """

    def decorate(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self: "CommandContext", *args: Any, **kwargs: Any) -> Any:
            self._ensure_live(method.__name__)
            if kind == "query":
                return method(self, *args, **kwargs)
            try:
                return method(self, *args, **kwargs)
            except ContextExpired:
                raise
            except (ChatvimError, ValueError) as exc:
                return res_error(str(exc))

        wrapper.exposed_as = kind  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorate


command = _operation("command")
factory = _operation("factory")
query = _operation("query")


class CommandContext:
    """Transient view of the engine, valid for one command invocation.

    Use as a context manager; any call after the ``with`` block raises
    :class:`ContextExpired`.
    """

    def __init__(self, engine: "Engine") -> None:
        self._engine = engine
        self._live = True

    def __enter__(self) -> "CommandContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._live = False
        return False

    @property
    def state(self) -> "EngineState":
        self._ensure_live("state")
        return self._engine.state

    @classmethod
    def exposed(cls) -> Dict[str, Exposure]:
        return {
            name: getattr(member, "exposed_as")
            for name, member in vars(cls).items()
            if hasattr(member, "exposed_as")
        }

    def _ensure_live(self, operation: str) -> None:
        if not self._live:
            raise ContextExpired(
                f"Context used for '{operation}' after its command finished"
            )

    # cursor & buffer ---------------------------------------------------

    @factory
    def cursor_move_forward(self, unit: str) -> Result:
        return from_flag(self._engine.state.buffer.move_forward(unit))

    @factory
    def cursor_move_backward(self, unit: str) -> Result:
        return from_flag(self._engine.state.buffer.move_backward(unit))

    @command
    def cursor_move_up(self) -> Result:
        return from_flag(self._engine.state.buffer.move_up())

    @command
    def cursor_move_down(self) -> Result:
        return from_flag(self._engine.state.buffer.move_down())

    @query
    def cursor_yank(self, start: Position, end: Position) -> str:
        return self._engine.state.buffer.yank(start, end)

    @factory
    def cursor_delete(self, start: Position, end: Position) -> Result:
        return from_flag(bool(self._engine.state.buffer.delete(start, end)))

    @command
    def cursor_delete_left(self) -> Result:
        return from_flag(self._engine.state.buffer.delete_left())

    @command
    def cursor_delete_right(self) -> Result:
        return from_flag(self._engine.state.buffer.delete_right())

    @factory
    def type(self, text: str) -> Result:
        """Insert ``text`` into the active input target."""

        state = self._engine.state
        if state.modes.input_target(state.stack.top) == "auxline":
            return from_flag(state.auxline.insert(text))
        return from_flag(state.buffer.insert(text))

    @query
    def get_clipboard(self) -> str:
        return self._engine.state.clipboard.get()

    @factory
    def set_clipboard(self, text: str) -> Result:
        self._engine.state.clipboard.set(text)
        return OK

    # auxiliary line ----------------------------------------------------

    @factory
    def switch_auxline(self, tag: str) -> Result:
        self._engine.state.auxline.switch(tag)
        return OK

    @factory
    def set_auxline_prompt(self, prompt: str) -> Result:
        self._engine.state.auxline.set_prompt(prompt)
        return OK

    @query
    def get_auxline_content(self) -> str:
        return self._engine.state.auxline.content

    @command
    def accept_auxline(self) -> Result:
        return from_flag(self._engine.state.auxline.accept())

    @command
    def clear_auxline(self) -> Result:
        return from_flag(self._engine.state.auxline.clear())

    # modes -------------------------------------------------------------

    @factory
    def push_mode(self, name: str) -> Result:
        return self._engine.state.stack.push(name)

    @command
    def pop_mode(self) -> Result:
        return self._engine.state.stack.pop()

    @factory
    def switch_mode(self, name: str) -> Result:
        return self._engine.state.stack.switch(name)

    @factory
    def enter_mode(self, name: str) -> Result:
        return self._engine.state.stack.switch(name)

    @query
    def current_mode(self) -> str:
        return self._engine.state.stack.top

    # message selection -------------------------------------------------

    @command
    def select_next_message(self) -> Result:
        return from_flag(self._engine.state.chat.select_next_message())

    @command
    def select_prev_message(self) -> Result:
        return from_flag(self._engine.state.chat.select_prev_message())

    @command
    def deselect_message(self) -> Result:
        return from_flag(self._engine.state.chat.deselect_message())

    @command
    def follow_reply(self) -> Result:
        return from_flag(self._engine.state.chat.follow_reply())

    @query
    def get_message_content(self) -> str:
        return self._engine.state.chat.require_selected().body

    @command
    def open_selected_message(self) -> Result:
        state = self._engine.state
        room = state.chat.require_room()
        message = state.chat.require_selected()
        if message.attachment:
            self._backend().open_attachment(
                room.id, message.id, state.settings.file_open_program
            )
            return OK
        url = _URL.search(message.body)
        if url is None:
            return res_error("No open action for this message")
        self._engine.open_external(state.settings.url_open_program, url.group(0))
        return OK

    # room selection ----------------------------------------------------

    @command
    def select_next_room(self) -> Result:
        query_text, unread_only = self._room_query()
        return from_flag(
            self._engine.state.chat.cycle_room(1, query_text, unread_only=unread_only)
        )

    @command
    def select_prev_room(self) -> Result:
        query_text, unread_only = self._room_query()
        return from_flag(
            self._engine.state.chat.cycle_room(-1, query_text, unread_only=unread_only)
        )

    @command
    def select_room_history_next(self) -> Result:
        return from_flag(self._engine.state.chat.selection.forward())

    @command
    def select_room_history_prev(self) -> Result:
        return from_flag(self._engine.state.chat.selection.back())

    @command
    def force_room_selection(self) -> Result:
        query_text, unread_only = self._room_query()
        self._engine.state.chat.force_selection(query_text, unread_only=unread_only)
        return OK

    # reply / edit ------------------------------------------------------

    @command
    def start_reply(self) -> Result:
        self._engine.state.chat.start_special("reply")
        return OK

    @command
    def start_edit(self) -> Result:
        state = self._engine.state
        message = state.chat.require_selected()
        if message.sender != state.settings.user_id:
            raise CommandError("Only your own messages can be edited")
        state.chat.start_special("edit")
        state.buffer.set_text(message.body)
        return OK

    @command
    def cancel_special_message(self) -> Result:
        return from_flag(self._engine.state.chat.cancel_special())

    @query
    def get_special_message(self) -> Optional[SpecialMessage]:
        return self._engine.state.chat.special

    # chat operations ---------------------------------------------------

    @command
    def send_message(self) -> Result:
        state = self._engine.state
        room = state.chat.require_room()
        body = state.buffer.text
        if not body.strip():
            return NOOP
        special = state.chat.special
        backend = self._backend()
        if special is not None and special.kind == "edit":
            backend.edit_message(special.room_id, special.message_id, body)
        else:
            reply_to = special.message_id if special is not None else None
            backend.send_message(room.id, body, reply_to=reply_to)
        state.buffer.clear()
        state.chat.special = None
        return OK

    @command
    def clear_message(self) -> Result:
        return from_flag(self._engine.state.buffer.clear())

    @factory
    def react(self, key: str) -> Result:
        room, message = self._selected()
        self._backend().react(room.id, message.id, key)
        return OK

    @factory
    def send_file(self, path: str) -> Result:
        room = self._engine.state.chat.require_room()
        self._backend().send_file(room.id, path)
        return OK

    @factory
    def save_file(self, path: str) -> Result:
        room, message = self._selected()
        if not message.attachment:
            return res_error("Selected message has no attachment")
        self._backend().save_attachment(room.id, message.id, path)
        return OK

    @factory
    def set_filter(self, text: str) -> Result:
        room = self._engine.state.chat.require_room()
        room.filter = parse_filter(text)
        room.filter_text = text
        if room.selected is not None and room.selected not in {
            message.id for message in room.visible()
        }:
            room.selected = None
        return OK

    @command
    def clear_filter(self) -> Result:
        room = self._engine.state.chat.require_room()
        if room.filter is None:
            return NOOP
        room.filter = None
        room.filter_text = ""
        return OK

    @command
    def clear_timeline_cache(self) -> Result:
        room = self._engine.state.chat.require_room()
        self._engine.state.chat.clear_timeline(room.id)
        self._backend().fetch_history(room.id)
        return OK

    # command line, banner, lifetime -----------------------------------

    @factory
    def run(self, text: str) -> Result:
        return self._engine.run_command_line(text, self)

    @query
    def get_error_message(self) -> Optional[str]:
        return self._engine.state.error_message

    @command
    def clear_error_message(self) -> Result:
        return from_flag(self._engine.state.clear_error())

    @command
    def quit(self) -> Result:
        self._engine.state.running = False
        return OK

    # helpers -----------------------------------------------------------

    def _backend(self) -> ChatBackend:
        backend = self._engine.backend
        if backend is None:
            raise CommandError("No chat backend connected")
        return backend

    def _selected(self) -> tuple[Room, Message]:
        chat = self._engine.state.chat
        return chat.require_room(), chat.require_selected()

    def _room_query(self) -> tuple[str, bool]:
        state = self._engine.state
        chain = state.modes.chain(state.stack.top)
        if not any(mode in _ROOM_FILTER_MODES for mode in chain):
            return "", False
        return state.auxline.content, "roomfilterunread" in chain


__all__ = ["CommandContext", "command", "factory", "query"]
