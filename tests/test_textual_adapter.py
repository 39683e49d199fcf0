from __future__ import annotations

from typing import List

from chatvim.adapters.textual import TextualChatAdapter, TextualUIHooks, chord_from_textual
from chatvim.adapters.textual.app import _parse_args, build_options, render_buffer, render_rooms
from chatvim.chat import LocalBackend
from chatvim.core import Engine, EngineView
from chatvim.keymaps import KeyChord
from chatvim.runtime.config import EngineOptions

ROOMS = {"!lobby:test": "lobby", "!random:test": "random"}


def make_engine() -> Engine:
    engine = Engine.from_options(
        EngineOptions(host="test", user="me"),
        backend=LocalBackend(ROOMS),
        opener=lambda argv: None,
    )
    engine.process_events()
    return engine


def test_textual_keys_become_chords() -> None:
    assert chord_from_textual("ctrl+n") == KeyChord.parse("<C-n>")
    assert chord_from_textual("enter") == KeyChord("Return")
    assert chord_from_textual("escape") == KeyChord("Esc")
    assert chord_from_textual("space", " ") == KeyChord("Space")
    assert chord_from_textual("A", "A") == KeyChord("A")
    assert chord_from_textual("exclamation_mark", "!") == KeyChord("!")
    assert chord_from_textual("shift+tab") == KeyChord("Tab", ("S",))
    assert chord_from_textual("f5") is None


def test_adapter_renders_frames_and_status() -> None:
    engine = make_engine()
    frames: List[EngineView] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(render=frames.append, update_status=statuses.append)
    adapter = TextualChatAdapter(engine, hooks)

    adapter.handle_textual_key("ctrl+n")
    adapter.handle_textual_key("i", character="i")
    adapter.handle_textual_key("h", character="h")

    assert frames[-1].buffer.text == "h"
    assert frames[-1].room_name == "lobby"
    assert statuses[-1] == "-- INSERT-LINE -- #lobby"


def test_adapter_shows_pending_keys_and_errors() -> None:
    engine = make_engine()
    statuses: List[str] = []
    adapter = TextualChatAdapter(
        engine, TextualUIHooks(render=lambda view: None, update_status=statuses.append)
    )

    result = adapter.handle_textual_key("d", character="d")
    assert result is not None and result.status == "pending"
    assert statuses[-1] == "-- NORMAL -- d"

    adapter.handle_textual_key("escape")
    adapter.handle_textual_key("v", character="v")
    adapter.handle_textual_key("y", character="y")
    assert statuses[-1] == "No current room"


def test_adapter_emits_log_lines_and_quits() -> None:
    engine = make_engine()
    logs: List[str] = []
    adapter = TextualChatAdapter(
        engine, TextualUIHooks(render=lambda view: None, log=logs.append)
    )

    assert adapter.handle_textual_key("f12") is None
    adapter.handle_textual_key("q", character="q")

    assert logs[0].startswith("ignored ->")
    assert any(line.startswith("key ->") for line in logs)
    assert not adapter.running


def test_adapter_applies_backend_events() -> None:
    backend = LocalBackend(ROOMS)
    engine = Engine.from_options(EngineOptions(host="test", user="me"), backend=backend)
    frames: List[EngineView] = []
    adapter = TextualChatAdapter(engine, TextualUIHooks(render=frames.append))

    assert adapter.process_events() == len(ROOMS)
    assert adapter.process_events() == 0
    assert render_rooms(frames[-1]) == "  lobby\n  random"


def test_app_helpers() -> None:
    engine = make_engine()
    engine.state.buffer.insert("hi")

    assert render_buffer(engine.snapshot()) == "hi█"

    options = build_options(_parse_args(["--host", "example.org", "--user", "alice"]))
    assert (options.host, options.user) == ("example.org", "alice")
