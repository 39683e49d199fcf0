from pathlib import Path

import pytest

from chatvim.runtime.config import ClientSettings, EngineOptions, default_user_config_path
from chatvim.runtime.telemetry import env_flag, env_value


def test_options_from_environment(tmp_path: Path) -> None:
    script = tmp_path / "mine.py"
    env = {
        "CHATVIM_CONFIG": str(script),
        "CHATVIM_CONFIG_POLICY": "strict",
        "CHATVIM_SWITCH_HOOKS": "off",
        "CHATVIM_HOST": "example.org",
        "CHATVIM_USER": "alice",
    }

    options = EngineOptions.from_env(env)

    assert options.user_config == script
    assert options.config_required
    assert options.user_config_policy == "strict"
    assert not options.switch_runs_enter_hooks
    assert (options.host, options.user) == ("example.org", "alice")


def test_default_config_only_used_when_present(tmp_path: Path) -> None:
    env = {"XDG_CONFIG_HOME": str(tmp_path)}
    expected = tmp_path / "chatvim" / "config.py"

    assert default_user_config_path(env) == expected
    assert EngineOptions.from_env(env).user_config is None

    expected.parent.mkdir()
    expected.write_text("", encoding="utf-8")
    options = EngineOptions.from_env(env)
    assert options.user_config == expected
    assert not options.config_required


def test_unknown_policy_is_rejected() -> None:
    with pytest.raises(ValueError, match="user_config_policy"):
        EngineOptions(user_config_policy="lenient")


def test_settings_copy_is_independent() -> None:
    settings = ClientSettings(host="test", user="me", user_colors={"@bob:test": 2})

    clone = settings.copy()
    clone.user_colors["@amy:test"] = 4

    assert settings.user_colors == {"@bob:test": 2}
    assert clone.user_id == "@me:test"


def test_env_helpers_use_the_prefix() -> None:
    env = {"CHATVIM_LOG_JSON": "Yes", "CHATVIM_LOG_FILE": "", "LOG_JSON": "0"}

    assert env_flag("LOG_JSON", False, env)
    assert env_value("LOG_FILE", env) is None
    assert not env_flag("NO_COLOR", False, env)
