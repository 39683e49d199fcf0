"""telelog wiring for the chat client.

Everything else in ``chatvim`` logs through four calls:

``configure(config=..., preset=...)``
    choose the telelog configuration (explicit, preset or environment)
``get_logger(name)``
    a cached ``telelog.Logger`` for ``name``
``record_event(name, data=...)``
    a structured ``event::<name>`` line
``span(name, component=..., metadata=...)``
    profile a block, optionally as a tracked component, with metadata pushed
    into the logger context while it runs

The client owns the terminal, so the ``tui`` preset writes to a timestamped
file under ``$XDG_CACHE_HOME/chatvim`` and never to the console. Environment
variables use the ``CHATVIM_`` prefix: ``LOG_LEVEL``, ``LOG_FILE``,
``LOG_JSON``, ``DISABLE_CONSOLE``, ``NO_COLOR``, ``LOG_BUFFERED``,
``LOG_BUFFER_SIZE`` and ``LOGGER`` (default logger name).
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

APP_NAME = "chatvim"
ENV_PREFIX = "CHATVIM_"
_TRUTHY = frozenset({"1", "true", "yes", "on"})

_loggers: MutableMapping[str, Any] = {}
_active: Optional[Any] = None


def env_value(name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """``CHATVIM_<name>`` from ``environ`` (default ``os.environ``); empty is unset."""

    env = os.environ if environ is None else environ
    return env.get(f"{ENV_PREFIX}{name}") or None


def env_flag(
    name: str, default: bool, environ: Optional[Mapping[str, str]] = None
) -> bool:
    raw = env_value(name, environ)
    if raw is None:
        return default
    return raw.lower() in _TRUTHY


def default_log_path(suffix: str = "") -> Path:
    cache_root = os.getenv("XDG_CACHE_HOME") or os.path.join(
        os.path.expanduser("~"), ".cache"
    )
    stamp = datetime.now().strftime("%Y-%m-%d_%H:%M:%S")
    return Path(cache_root) / APP_NAME / f"{APP_NAME}.log.{stamp}{suffix}"


def _log_file(fallback: Path) -> str:
    explicit = env_value("LOG_FILE")
    target = Path(explicit) if explicit else fallback
    target.parent.mkdir(parents=True, exist_ok=True)
    return str(target)


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


@dataclass(frozen=True, slots=True)
class _Preset:
    level: Optional[str]
    console: bool
    json: bool = False
    buffered: bool = False
    file_suffix: Optional[str] = None


# ``level=None`` defers to CHATVIM_LOG_LEVEL
_PRESETS: Dict[str, _Preset] = {
    "development": _Preset(level="DEBUG", console=True),
    "tui": _Preset(level=None, console=False, buffered=True, file_suffix=""),
    "production": _Preset(level=None, console=False, buffered=True, file_suffix=""),
    "performance": _Preset(
        level="DEBUG", console=False, json=True, buffered=True, file_suffix=".perf.json"
    ),
}


def _env_level() -> str:
    return (env_value("LOG_LEVEL") or "INFO").upper()


def _from_preset(name: str) -> Any:
    try:
        preset = _PRESETS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown telemetry preset '{name}', expected one of {sorted(_PRESETS)}"
        ) from None
    config = tl.Config()
    config.with_min_level(preset.level or _env_level())
    config.with_console_output(preset.console)
    if preset.console:
        config.with_colored_output(True)
    config.with_json_format(preset.json)
    if preset.buffered:
        config.with_buffering(True)
    if preset.file_suffix is not None:
        config.with_file_output(_log_file(default_log_path(preset.file_suffix)))
    return config


def _from_environment() -> Any:
    config = tl.Config()
    config.with_min_level(_env_level())
    console = not env_flag("DISABLE_CONSOLE", False)
    config.with_console_output(console)
    if console:
        config.with_colored_output(not env_flag("NO_COLOR", False))
    if env_flag("LOG_JSON", False):
        config.with_json_format(True)
    log_file = env_value("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)
    if env_flag("LOG_BUFFERED", False):
        config.with_buffering(True)
        config.with_buffer_size(int(env_value("LOG_BUFFER_SIZE") or "2048"))
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active configuration and drop cached loggers.

    ``config`` is an explicit ``telelog.Config``; ``preset`` names one of
    ``development``, ``tui``, ``production`` or ``performance``. Without
    either, the ``CHATVIM_*`` environment decides.
    """

    global _active
    if config is not None and preset is not None:
        raise ValueError("configure() takes either `config` or `preset`")
    if preset is not None:
        config = _from_preset(preset)
    elif config is None:
        config = _from_environment()
    config.with_profiling(True)
    _active = config
    _loggers.clear()


def get_logger(name: Optional[str] = None) -> Any:
    if _active is None:
        configure()
    key = name or env_value("LOGGER") or APP_NAME
    logger = _loggers.get(key)
    if logger is None:
        logger = _loggers[key] = tl.Logger.with_config(key, _active)
    return logger


def _write(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    method_name = str(level).lower()
    structured = getattr(logger, f"{method_name}_with", None)
    if structured is not None:
        structured(message, [(str(key), _text(value)) for key, value in payload.items()])
        return
    plain = getattr(logger, method_name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    _write(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass(slots=True)
class SpanHandle:
    """Lets the body of a :func:`span` annotate or flag the running block."""

    logger: Any
    name: str
    component: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def warn(self, reason: str) -> None:
        self._report("warning", "span::warn", reason)

    def fail(self, reason: str) -> None:
        self._report("error", "span::fail", reason)

    def _report(self, level: str, message: str, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.name, **self.metadata}
        if self.component:
            payload["component"] = self.component
        payload["reason"] = reason
        _write(self.logger, level, message, payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block as ``name``.

    ``component=True`` also tracks it as a component of the same name, a
    string tracks it under that name. An exception escaping the block is
    reported through :meth:`SpanHandle.fail` and re-raised.
    """

    logger = get_logger(logger_name)
    tracked = name if component is True else component or None
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    handle = SpanHandle(logger=logger, name=name, component=tracked, metadata=dict(context))

    with ExitStack() as stack:
        for key, value in context.items():
            logger.add_context(key, value)
            stack.callback(logger.remove_context, key)
        if tracked:
            stack.enter_context(logger.track_component(tracked))
        stack.enter_context(logger.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise


__all__ = [
    "APP_NAME",
    "ENV_PREFIX",
    "SpanHandle",
    "configure",
    "default_log_path",
    "env_flag",
    "env_value",
    "get_logger",
    "record_event",
    "span",
]
