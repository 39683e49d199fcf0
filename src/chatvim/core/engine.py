"""The engine: key dispatch, command execution and backend completions."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Callable, Deque, Iterable, List, Optional, Sequence, Union

from chatvim.actions.result import Command, Result, command_name, from_flag, invoke, res_error
from chatvim.chat import BackendEvent, ChatBackend, LocalBackend, apply_event
from chatvim.keymaps import KeyChord, KeymapResolver, KeySequence
from chatvim.modes import DispatchResult, InputTarget, KeyDispatcher
from chatvim.runtime import telemetry
from chatvim.runtime.config import EngineOptions
from chatvim.runtime.processes import ProcessOpener, default_opener

from .context import CommandContext
from .state import EngineState, EngineView

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.scripting.bridge import ScriptBridge

Opener = Callable[[Sequence[str]], object]
KeyInput = Union[KeyChord, str]


class Engine:
    """Single-threaded owner of :class:`EngineState`.

    Keys and backend completions are handled one at a time on the calling
    thread; backends only ever :meth:`post` events, which are applied by
    :meth:`process_events`.
    """

    def __init__(
        self,
        state: EngineState,
        *,
        backend: Optional[ChatBackend] = None,
        opener: Opener = default_opener,
    ) -> None:
        self.state = state
        self.backend = backend
        self.bridge: Optional["ScriptBridge"] = None
        self._opener = opener
        self._events: Deque[BackendEvent] = deque()
        self.resolver = KeymapResolver(state.keymaps, logger_name="chatvim.keymaps")
        state.stack.hook_runner = self.execute
        self.dispatcher = KeyDispatcher(
            state.modes,
            state.stack,
            self.resolver,
            execute=self.execute,
            report_error=state.set_error,
            handle_input=self._handle_input,
        )

    @classmethod
    def from_options(
        cls,
        options: Optional[EngineOptions] = None,
        *,
        backend: Optional[ChatBackend] = None,
        opener: Opener = default_opener,
    ) -> "Engine":
        """Build an engine and load the base and user configuration scripts."""

        from chatvim.scripting.bridge import ScriptBridge

        options = options or EngineOptions.from_env()
        engine = cls(
            EngineState.create(options),
            backend=backend if backend is not None else LocalBackend(),
            opener=opener,
        )
        bridge = ScriptBridge(engine)
        bridge.load(options)
        engine.connect()
        return engine

    def connect(self) -> None:
        if self.backend is not None:
            self.backend.attach(self.post, user_id=self.state.settings.user_id)

    # key handling ------------------------------------------------------

    def handle_key(self, key: KeyInput) -> DispatchResult:
        chord = KeyChord.parse(key) if isinstance(key, str) else key
        return self.dispatcher.handle(chord)

    def feed(self, notation: str) -> List[DispatchResult]:
        """Dispatch every chord of ``notation`` (vim key notation)."""

        results = []
        for chord in KeySequence.parse(notation).chords:
            results.append(self.handle_key(chord))
            if not self.state.running:
                break
        return results

    def run(self, keys: Iterable[KeyInput]) -> None:
        """Consume a key source until it ends or a command quits."""

        for key in keys:
            self.process_events()
            self.handle_key(key)
            if not self.state.running:
                break
        self.process_events()

    def execute(self, command: Command) -> Result:
        with telemetry.span(
            "command::execute",
            logger_name="chatvim.engine",
            component="commands",
            metadata={"command": command_name(command), "mode": self.state.stack.top},
        ) as handle:
            with CommandContext(self) as context:
                result = invoke(command, context)
            if result.is_error():
                handle.warn(result.message or "")
            return result

    def run_command_line(self, text: str, context: CommandContext) -> Result:
        if self.bridge is None:
            return res_error("No command line available")
        return self.bridge.run(text, context)

    def open_external(self, program: str, target: str) -> None:
        telemetry.record_event("engine.open", data={"program": program, "target": target})
        self._opener([program, target])

    # backend completions ----------------------------------------------

    def post(self, event: BackendEvent) -> None:
        self._events.append(event)

    def process_events(self) -> int:
        processed = 0
        while self._events:
            event = self._events.popleft()
            with telemetry.span(
                "engine::event",
                logger_name="chatvim.engine",
                component="backend",
                metadata={"event": type(event).__name__},
            ):
                error = apply_event(self.state.chat, event)
            if error is not None:
                self.state.set_error(error)
            processed += 1
        if isinstance(self._opener, ProcessOpener):
            self._opener.reap()
        return processed

    # rendering ---------------------------------------------------------

    def snapshot(self) -> EngineView:
        state = self.state
        room = state.chat.current_room
        messages: tuple[tuple[str, str, str], ...] = ()
        if room is not None:
            messages = tuple((m.id, m.sender, m.body) for m in room.visible())
        return EngineView(
            mode=state.stack.top,
            mode_stack=state.stack.modes,
            pending_keys=self.dispatcher.pending,
            buffer=state.buffer.snapshot(),
            auxline=state.auxline.snapshot(),
            error_message=state.error_message,
            room_id=room.id if room else None,
            room_name=room.name if room else None,
            rooms=tuple((r.id, r.name, r.unread) for r in state.chat.rooms.values()),
            messages=messages,
            selected_message=room.selected if room else None,
            special=state.chat.special,
            running=state.running,
        )

    # unbound keys ------------------------------------------------------

    def _handle_input(self, target: InputTarget, chord: KeyChord) -> Optional[Result]:
        text = chord.text
        if target == "auxline":
            line = self.state.auxline
            if text is not None:
                return from_flag(line.insert(text))
            edits = {
                "Backspace": line.delete_left,
                "Delete": line.delete_right,
                "Left": lambda: line.move(-1),
                "Right": lambda: line.move(1),
                "Home": line.home,
                "End": line.end,
                "Up": line.history_prev,
                "Down": line.history_next,
            }
        else:
            buffer = self.state.buffer
            if text is not None:
                return from_flag(buffer.insert(text))
            edits = {
                "Backspace": buffer.delete_left,
                "Delete": buffer.delete_right,
                "Left": lambda: buffer.move_backward("cell"),
                "Right": lambda: buffer.move_forward("cell"),
                "Home": lambda: buffer.move_backward("line_separator"),
                "End": lambda: buffer.move_forward("line_separator"),
                "Up": buffer.move_up,
                "Down": buffer.move_down,
                "Return": lambda: buffer.insert("\n"),
            }
        if chord.modifiers:
            return None
        edit = edits.get(chord.key)
        if edit is None:
            return None
        return from_flag(edit())


__all__ = ["Engine"]
