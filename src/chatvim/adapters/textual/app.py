"""Executable Textual app that hosts the chat engine."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Header, Static

from chatvim.chat import LocalBackend
from chatvim.core import Engine, EngineView
from chatvim.errors import ChatvimError
from chatvim.runtime import telemetry
from chatvim.runtime.config import USER_CONFIG_POLICIES, EngineOptions

from .controller import TextualChatAdapter, TextualUIHooks

DEMO_ROOMS = {"!lobby:localhost": "lobby", "!random:localhost": "random"}


@dataclass
class UIState:
    rooms_text: str = ""
    timeline_text: str = ""
    buffer_text: str = ""
    status_text: str = ""
    auxline_text: str = ""


def render_rooms(view: EngineView) -> str:
    lines = []
    for room_id, name, unread in view.rooms:
        marker = ">" if room_id == view.room_id else " "
        badge = f" ({unread})" if unread else ""
        lines.append(f"{marker} {name}{badge}")
    return "\n".join(lines)


def render_timeline(view: EngineView) -> str:
    lines = []
    for message_id, sender, body in view.messages:
        marker = "*" if message_id == view.selected_message else " "
        lines.append(f"{marker} {sender}: {body}")
    return "\n".join(lines)


def render_buffer(view: EngineView) -> str:
    text, cursor = view.buffer.text, view.buffer.cursor
    return text[:cursor] + "█" + text[cursor:]


def render_auxline(view: EngineView) -> str:
    if view.auxline.tag is None:
        return ""
    return f"{view.auxline.prompt}{view.auxline.content}"


class ChatvimApp(App[None]):
    """Minimal Textual UI embedding the chat engine."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#rooms {
		width: 24;
		border: round $accent;
	}

	#timeline {
		width: 1fr;
		border: round $accent;
		overflow: auto;
	}

	#buffer-view {
		height: 5;
		border: round $accent;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#aux-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    def __init__(self, engine: Engine) -> None:
        super().__init__()
        self.engine = engine
        self._state = UIState()
        self.adapter: TextualChatAdapter | None = None
        self._rooms_widget: Static | None = None
        self._timeline_widget: Static | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        self._auxline_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="main"):
            with Horizontal(id="panes"):
                self._rooms_widget = Static("", id="rooms")
                self._timeline_widget = Static("", id="timeline")
                yield self._rooms_widget
                yield self._timeline_widget
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        self._auxline_widget = Static("", id="aux-line")
        yield self._status_widget
        yield self._auxline_widget

    async def on_mount(self) -> None:
        hooks = TextualUIHooks(
            render=self._render_view,
            update_status=self._update_status,
            log=self._log_line,
        )
        self.adapter = TextualChatAdapter(self.engine, hooks)
        self.set_interval(0.1, self._process_events)

    def _process_events(self) -> None:
        if self.adapter:
            self.adapter.process_events()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        self.adapter.handle_textual_key(event.key, character=event.character)
        event.stop()
        if not self.adapter.running:
            self.exit()

    def _render_view(self, view: EngineView) -> None:
        self._state.rooms_text = render_rooms(view)
        self._state.timeline_text = render_timeline(view)
        self._state.buffer_text = render_buffer(view)
        self._state.auxline_text = render_auxline(view)
        for widget, text in (
            (self._rooms_widget, self._state.rooms_text),
            (self._timeline_widget, self._state.timeline_text),
            (self._buffer_widget, self._state.buffer_text),
            (self._auxline_widget, self._state.auxline_text),
        ):
            if widget:
                widget.update(text)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _log_line(self, line: str) -> None:
        telemetry.record_event("tui.trace", level="debug", data={"line": line})


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the chatvim terminal client.")
    parser.add_argument("--config", help="User configuration script (config.py)")
    parser.add_argument("--host", help="Chat server host, overrides the scripts")
    parser.add_argument("--user", help="User name, overrides the scripts")
    parser.add_argument(
        "--config-policy",
        choices=USER_CONFIG_POLICIES,
        default=None,
        help="What to do when the user configuration fails (default: fallback)",
    )
    parser.add_argument(
        "--log-preset",
        default="tui",
        help="telelog preset: development, tui, production or performance",
    )
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> EngineOptions:
    options = EngineOptions.from_env()
    if args.config:
        options = EngineOptions(
            user_config=args.config,
            config_required=True,
            user_config_policy=options.user_config_policy,
            switch_runs_enter_hooks=options.switch_runs_enter_hooks,
            host=options.host,
            user=options.user,
        )
    if args.config_policy:
        options.user_config_policy = args.config_policy
    if args.host:
        options.host = args.host
    if args.user:
        options.user = args.user
    return options


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    try:
        engine = Engine.from_options(
            build_options(args), backend=LocalBackend(DEMO_ROOMS)
        )
    except ChatvimError as exc:
        print(f"chatvim: {exc}", file=sys.stderr)
        return 1
    ChatvimApp(engine).run()
    return 0


if __name__ == "__main__":  # pragma: no cover - manual launch
    sys.exit(main())
