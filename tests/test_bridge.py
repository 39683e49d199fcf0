from pathlib import Path
from typing import List, Optional

import pytest

from chatvim.chat import LocalBackend, Message
from chatvim.core import CommandContext, Engine
from chatvim.errors import ScriptLoadError
from chatvim.runtime.config import EngineOptions
from chatvim.scripting import ScriptBridge, base_config_source

ROOMS = {"!lobby:test": "lobby", "!random:test": "random"}


def make_engine(
    config: Optional[Path] = None,
    *,
    required: bool = False,
    policy: str = "fallback",
    host: Optional[str] = "localhost",
    user: Optional[str] = "me",
) -> Engine:
    options = EngineOptions(
        user_config=config,
        config_required=required,
        user_config_policy=policy,
        host=host,
        user=user,
    )
    engine = Engine.from_options(options, backend=LocalBackend(ROOMS), opener=lambda argv: None)
    engine.process_events()
    return engine


def write_config(tmp_path: Path, source: str) -> Path:
    path = tmp_path / "config.py"
    path.write_text(source, encoding="utf-8")
    return path


def test_base_config_binds_quit() -> None:
    engine = make_engine()

    engine.feed("q")

    assert not engine.state.running
    assert "bind(" in base_config_source()


def test_rebinding_q_to_noop_keeps_running(tmp_path: Path) -> None:
    config = write_config(tmp_path, 'bind("q", "normal", noop)\n')
    engine = make_engine(config)

    engine.feed("q")

    assert engine.state.running
    binding = next(
        b for b in engine.state.keymaps.iter_bindings("normal") if b.key_signature == "q"
    )
    assert binding.source == "user"


def test_failing_user_config_falls_back_to_defaults(tmp_path: Path) -> None:
    config = write_config(
        tmp_path,
        'bind("q", "normal", noop)\ndefine_mode("scratch", "normal")\nraise RuntimeError("broken")\n',
    )
    engine = make_engine(config)

    assert engine.bridge is not None
    assert "broken" in (engine.bridge.diagnostic or "")
    assert "using defaults" in (engine.state.error_message or "")
    assert "scratch" not in engine.state.modes
    engine.feed("q")
    assert not engine.state.running


def test_syntax_error_falls_back(tmp_path: Path) -> None:
    config = write_config(tmp_path, "bind('q', 'normal'\n")

    engine = make_engine(config)

    assert engine.state.error_message is not None
    assert engine.state.keymaps.stats().binding_count > 0


def test_strict_policy_aborts(tmp_path: Path) -> None:
    config = write_config(tmp_path, 'bind("q", "nonexistent-mode", noop)\n')

    with pytest.raises(ScriptLoadError, match="nonexistent-mode"):
        make_engine(config, policy="strict")


def test_required_config_must_exist(tmp_path: Path) -> None:
    missing = tmp_path / "absent.py"

    with pytest.raises(ScriptLoadError):
        make_engine(missing, required=True)
    assert make_engine(missing).state.running


def test_missing_host_or_user_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(ScriptLoadError, match="Host not configured."):
        make_engine(host=None)
    with pytest.raises(ScriptLoadError, match="User not configured."):
        make_engine(user=None)

    config = write_config(tmp_path, 'host("example.org")\nuser("alice")\n')
    engine = make_engine(config, host=None, user=None)
    assert engine.state.settings.user_id == "@alice:example.org"


def test_settings_from_user_config(tmp_path: Path) -> None:
    config = write_config(
        tmp_path,
        'notification_style("nameonly")\n'
        'url_open_program("firefox")\n'
        'user_color_ansi("@bob:test", 33)\n',
    )
    engine = make_engine(config)

    settings = engine.state.settings
    assert settings.notification_style == "nameonly"
    assert settings.url_open_program == "firefox"
    assert settings.user_colors == {"@bob:test": 33}


def test_invalid_setting_falls_back(tmp_path: Path) -> None:
    config = write_config(tmp_path, 'notification_style("loud")\n')

    engine = make_engine(config)

    assert engine.state.settings.notification_style == "full"
    assert "loud" in (engine.state.error_message or "")


def test_script_command_exception_becomes_error(tmp_path: Path) -> None:
    config = write_config(
        tmp_path,
        "def _explode(c):\n"
        "    raise ValueError('bad input')\n"
        "\n"
        'bind("B", "normal", _explode)\n',
    )
    engine = make_engine(config)

    result = engine.handle_key("B")

    assert result.result is not None and result.result.is_error()
    assert engine.state.error_message == "bad input"
    assert engine.state.running


def test_limit_action_receives_content_and_mode_pops(tmp_path: Path) -> None:
    config = write_config(
        tmp_path,
        "received = []\n"
        "\n"
        "def _limit(c, content):\n"
        "    received.append((content, c.get_auxline_content(), c.current_mode()))\n"
        "    return res_error('limit rejected')\n"
        "\n"
        'bind("<Return>", "limit", finish_auxline(_limit))\n',
    )
    engine = make_engine(config)

    engine.feed("L50")
    assert engine.state.stack.top == "limit"
    assert engine.state.auxline.content == "50"
    engine.feed("<Return>")

    assert engine.bridge is not None
    assert engine.bridge.namespace["received"] == [("50", "50", "limit")]
    assert engine.state.auxline.history("limit") == ("50",)
    assert engine.state.stack.top == "normal"
    assert engine.state.error_message == "limit rejected"


def test_command_line_runs_namespace_entries() -> None:
    engine = make_engine()

    engine.feed(":nosuch<Return>")
    assert engine.state.error_message == "Unknown command 'nosuch'"
    assert engine.state.stack.top == "normal"

    engine.feed("<Esc>:q<Return>")
    assert not engine.state.running


def test_command_line_passes_arguments() -> None:
    engine = make_engine()
    engine.state.chat.select_room("!lobby:test")

    engine.feed(":react<Space>+1<Return>")

    assert engine.state.error_message == "No message selected"


def test_registration_is_closed_after_loading() -> None:
    engine = make_engine()

    engine.feed(":bind x normal quit<Return>")

    assert "only available while loading configuration" in (
        engine.state.error_message or ""
    )
    assert engine.bridge is not None and not engine.bridge.loading


def test_cancel_auxline_clears_error_first() -> None:
    engine = make_engine()
    engine.feed(":nosuch<Return>:")
    assert engine.state.stack.top == "command"

    engine.feed("<Esc>")
    assert engine.state.error_message is None
    assert engine.state.stack.top == "command"

    engine.feed("<Esc>")
    assert engine.state.stack.top == "normal"


def test_bridge_run_directly() -> None:
    engine = make_engine()
    bridge = engine.bridge
    assert isinstance(bridge, ScriptBridge)
    outcomes: List[str] = []

    with CommandContext(engine) as context:
        outcomes.append(repr(bridge.run("", context)))
        outcomes.append(repr(bridge.run("_apply_limit", context)))
        outcomes.append(repr(bridge.run('push_mode "visual"', context)))

    assert outcomes == ["NoOp", "Error(\"Unknown command '_apply_limit'\")", "Ok"]
    assert engine.state.stack.top == "visual"


def test_visual_yank_copies_message_body() -> None:
    backend = LocalBackend(ROOMS)
    options = EngineOptions(host="localhost", user="me")
    engine = Engine.from_options(options, backend=backend, opener=lambda argv: None)
    engine.process_events()
    backend.seed("!lobby:test", [Message(id="$1", sender="@bob:test", body="hi there")])
    engine.state.chat.select_room("!lobby:test")
    backend.fetch_history("!lobby:test")
    engine.process_events()

    engine.feed("vy")

    assert engine.state.clipboard.get() == "hi there"
    assert engine.state.stack.top == "visual"


def test_user_config_exit_falls_back(tmp_path: Path) -> None:
    config = write_config(tmp_path, 'bind("q", "normal", noop)\nimport sys\nsys.exit(3)\n')

    engine = make_engine(config)

    assert "exit(3)" in (engine.state.error_message or "")
    engine.feed("q")
    assert not engine.state.running


def test_user_config_exit_is_fatal_when_strict(tmp_path: Path) -> None:
    config = write_config(tmp_path, "import sys\nsys.exit(3)\n")

    with pytest.raises(ScriptLoadError, match=r"called exit\(3\)"):
        make_engine(config, policy="strict")


def test_bound_command_cannot_exit_the_client(tmp_path: Path) -> None:
    config = write_config(
        tmp_path,
        "import sys\n"
        "\n"
        'bind("Z", "normal", lambda c: sys.exit(0))\n',
    )
    engine = make_engine(config)

    result = engine.handle_key("Z")

    assert result.result is not None and result.result.is_error()
    assert "use quit" in (engine.state.error_message or "")
    assert engine.state.running
