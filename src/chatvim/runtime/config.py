"""Launch options and script-configured client settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from .telemetry import APP_NAME, env_flag, env_value

USER_CONFIG_POLICIES = ("fallback", "strict")
NOTIFICATION_STYLES = ("disabled", "nameonly", "nameandgroup", "full")
DEFAULT_OPEN_PROGRAM = "xdg-open"


def default_user_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    config_root = env.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config"
    )
    return Path(config_root) / APP_NAME / "config.py"


@dataclass(slots=True)
class EngineOptions:
    """Startup knobs that are not part of the configuration scripts."""

    base_mode: str = "normal"
    user_config: Optional[Path] = None
    config_required: bool = False
    user_config_policy: str = "fallback"
    switch_runs_enter_hooks: bool = True
    host: Optional[str] = None
    user: Optional[str] = None

    def __post_init__(self) -> None:
        if self.user_config_policy not in USER_CONFIG_POLICIES:
            raise ValueError(
                f"user_config_policy must be one of {USER_CONFIG_POLICIES}, "
                f"got '{self.user_config_policy}'"
            )
        if self.user_config is not None:
            self.user_config = Path(self.user_config).expanduser()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineOptions":
        env = os.environ if environ is None else environ
        explicit = env_value("CONFIG", env)
        if explicit:
            user_config: Optional[Path] = Path(explicit)
            required = True
        else:
            candidate = default_user_config_path(env)
            user_config = candidate if candidate.exists() else None
            required = False
        return cls(
            user_config=user_config,
            config_required=required,
            user_config_policy=env_value("CONFIG_POLICY", env) or "fallback",
            switch_runs_enter_hooks=env_flag("SWITCH_HOOKS", True, env),
            host=env_value("HOST", env),
            user=env_value("USER", env),
        )


@dataclass(slots=True)
class ClientSettings:
    """Values the configuration scripts set through the bridge."""

    host: Optional[str] = None
    user: Optional[str] = None
    notification_style: str = "full"
    file_open_program: str = DEFAULT_OPEN_PROGRAM
    url_open_program: str = DEFAULT_OPEN_PROGRAM
    user_colors: Dict[str, int] = field(default_factory=dict)

    @property
    def user_id(self) -> str:
        return f"@{self.user}:{self.host}"

    def copy(self) -> "ClientSettings":
        return ClientSettings(
            host=self.host,
            user=self.user,
            notification_style=self.notification_style,
            file_open_program=self.file_open_program,
            url_open_program=self.url_open_program,
            user_colors=dict(self.user_colors),
        )


__all__ = [
    "EngineOptions",
    "ClientSettings",
    "NOTIFICATION_STYLES",
    "USER_CONFIG_POLICIES",
    "default_user_config_path",
]
