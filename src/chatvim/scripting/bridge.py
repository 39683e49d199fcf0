"""Loads the configuration scripts and exposes the engine to them.

Configuration scripts are plain Python executed, in order, into one shared
namespace: the built-in ``base_config.py`` first, then the user's
``config.py``. Both register modes and bindings through the functions
installed here; later registrations overwrite earlier ones.
"""

from __future__ import annotations

import builtins
import shlex
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from chatvim.actions import (
    cancel_auxline,
    context_command,
    context_factory,
    finish_auxline,
    noop,
    paste_after,
    paste_before,
    run_all,
    run_first,
    vim_change,
    vim_delete,
    vim_yank,
)
from chatvim.actions.result import Result, invoke, is_error, is_noop, is_ok, res_error, res_noop, res_ok
from chatvim.buffer import backward, forward
from chatvim.core.context import CommandContext
from chatvim.errors import CommandError, ScriptLoadError
from chatvim.keymaps import Binding, KeySequence, RegistrySnapshot
from chatvim.modes.registry import ModeSnapshot
from chatvim.runtime.config import NOTIFICATION_STYLES, ClientSettings, EngineOptions
from chatvim.runtime.telemetry import record_event, span

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.core.engine import Engine

BASE_CONFIG = "base_config.py"
BASE_CONFIG_NAME = "<chatvim base_config.py>"


@dataclass(slots=True)
class _Snapshot:
    bindings: RegistrySnapshot
    modes: ModeSnapshot
    settings: ClientSettings
    namespace: Dict[str, Any]


def base_config_source() -> str:
    return resources.files("chatvim.scripting").joinpath(BASE_CONFIG).read_text(
        encoding="utf-8"
    )


class ScriptBridge:
    """Shared script namespace plus the load/fallback policy around it."""

    def __init__(self, engine: "Engine") -> None:
        self.engine = engine
        engine.bridge = self
        self.namespace: Dict[str, Any] = {}
        self.diagnostic: Optional[str] = None
        self._origin: Optional[str] = None
        self._populate()

    @property
    def loading(self) -> bool:
        return self._origin is not None

    # loading -----------------------------------------------------------

    def load(self, options: EngineOptions) -> None:
        """Run the whole startup sequence described by ``options``."""

        self.load_base()
        if options.user_config is not None:
            self.load_user(
                options.user_config,
                required=options.config_required,
                policy=options.user_config_policy,
            )
        self.apply_overrides(host=options.host, user=options.user)
        self.finalize()

    def load_base(self, source: Optional[str] = None) -> None:
        text = base_config_source() if source is None else source
        try:
            self._execute(text, BASE_CONFIG_NAME, origin="base")
        except (Exception, SystemExit) as exc:
            raise ScriptLoadError(
                f"built-in configuration failed: {_describe(exc)}", path=BASE_CONFIG_NAME
            ) from exc

    def load_user(
        self, path: Path | str, *, required: bool = False, policy: str = "fallback"
    ) -> bool:
        """Evaluate the user script, falling back to the defaults on failure.

        Returns ``False`` when the script failed and the post-base state was
        restored. Failures are fatal when the file was requested explicitly
        (``required``) or the policy is ``strict``.
        """

        location = Path(path).expanduser()
        if not location.exists() and not required:
            record_event("script.user_missing", level="debug", data={"path": str(location)})
            return True
        snapshot = self._snapshot()
        try:
            text = location.read_text(encoding="utf-8")
            self._execute(text, str(location), origin="user")
        except (Exception, SystemExit) as exc:
            if required or policy == "strict":
                raise ScriptLoadError(_describe(exc), path=location) from exc
            self._restore(snapshot)
            self.diagnostic = f"{location}: {_describe(exc)}"
            record_event(
                "script.user_failed",
                level="error",
                data={"path": str(location), "error": repr(exc)},
            )
            self.engine.state.set_error(
                f"Configuration {location} failed, using defaults: {_describe(exc)}"
            )
            return False
        return True

    def apply_overrides(self, *, host: Optional[str] = None, user: Optional[str] = None) -> None:
        settings = self.engine.state.settings
        if host:
            settings.host = host
        if user:
            settings.user = user

    def finalize(self) -> ClientSettings:
        settings = self.engine.state.settings
        if not settings.host:
            raise ScriptLoadError("Host not configured.")
        if not settings.user:
            raise ScriptLoadError("User not configured.")
        record_event(
            "script.loaded",
            data={
                "user": settings.user_id,
                "bindings": self.engine.state.keymaps.stats().binding_count,
            },
        )
        return settings

    def _execute(self, source: str, filename: str, *, origin: str) -> None:
        with span(
            "scripting::load",
            logger_name="chatvim.scripting",
            component="scripting",
            metadata={"script": filename},
        ):
            code = compile(source, filename, "exec")
            self._origin = origin
            try:
                exec(code, self.namespace)
            finally:
                self._origin = None

    def _snapshot(self) -> _Snapshot:
        state = self.engine.state
        return _Snapshot(
            bindings=state.keymaps.snapshot(),
            modes=state.modes.snapshot(),
            settings=state.settings.copy(),
            namespace=dict(self.namespace),
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        state = self.engine.state
        state.keymaps.restore(snapshot.bindings)
        state.modes.restore(snapshot.modes)
        state.settings = snapshot.settings.copy()
        self.namespace.clear()
        self.namespace.update(snapshot.namespace)

    # command line ------------------------------------------------------

    def run(self, text: str, context: CommandContext) -> Result:
        """Execute ``name arg...`` by looking ``name`` up in the namespace."""

        with span(
            "scripting::run",
            logger_name="chatvim.scripting",
            component="scripting",
            metadata={"line": text},
        ):
            try:
                words = shlex.split(text)
            except ValueError as exc:
                return res_error(f"Invalid command line: {exc}")
            if not words:
                return res_noop()
            name, args = words[0], words[1:]
            target = self.namespace.get(name)
            if name.startswith("_") or not callable(target):
                return res_error(f"Unknown command '{name}'")
            if not args:
                return invoke(target, context)
            try:
                command = target(*args)
            except (Exception, SystemExit) as exc:
                return res_error(f"{name}: {_describe(exc)}")
            if not callable(command):
                return res_error(f"'{name}' does not take arguments")
            return invoke(command, context)

    # namespace ---------------------------------------------------------

    def _populate(self) -> None:
        ns = self.namespace
        ns["__builtins__"] = builtins
        ns["__name__"] = "chatvim_config"

        for name, kind in CommandContext.exposed().items():
            if kind == "command":
                ns[name] = context_command(name)
            elif kind == "factory":
                ns[name] = context_factory(name)

        ns.update(
            define_mode=self._loading_only("define_mode", self.define_mode),
            on_enter=self._loading_only("on_enter", self.on_enter),
            on_leave=self._loading_only("on_leave", self.on_leave),
            bind=self._loading_only("bind", self.bind),
            unbind=self._loading_only("unbind", self.unbind),
            clear_bindings=self._loading_only("clear_bindings", self.clear_bindings),
            host=self._loading_only("host", self.set_host),
            user=self._loading_only("user", self.set_user),
            notification_style=self.set_notification_style,
            file_open_program=self.set_file_open_program,
            url_open_program=self.set_url_open_program,
            user_color_ansi=self.set_user_color,
            res_ok=res_ok,
            res_error=res_error,
            res_noop=res_noop,
            is_ok=is_ok,
            is_error=is_error,
            is_noop=is_noop,
            run_first=run_first,
            run_all=run_all,
            vim_delete=vim_delete,
            vim_change=vim_change,
            vim_yank=vim_yank,
            paste_before=paste_before,
            paste_after=paste_after,
            forward=forward,
            backward=backward,
            finish_auxline=finish_auxline,
            cancel_auxline=cancel_auxline,
            noop=noop,
        )

    def _loading_only(
        self, name: str, function: Callable[..., Any]
    ) -> Callable[..., Any]:
        def guarded(*args: Any, **kwargs: Any) -> Any:
            if not self.loading:
                raise CommandError(
                    f"'{name}' is only available while loading configuration"
                )
            return function(*args, **kwargs)

        guarded.__name__ = guarded.__qualname__ = name
        return guarded

    # registration ------------------------------------------------------

    def define_mode(self, name: str, parent: Optional[str] = None) -> None:
        self.engine.state.modes.define_mode(name, parent)

    def on_enter(self, mode: str, command: Callable[..., Any]) -> None:
        self.engine.state.modes.set_on_enter(mode, _require_command(command, "on_enter"))

    def on_leave(self, mode: str, command: Callable[..., Any]) -> None:
        self.engine.state.modes.set_on_leave(mode, _require_command(command, "on_leave"))

    def bind(self, sequence: str, mode: str, command: Callable[..., Any]) -> None:
        state = self.engine.state
        state.modes.get(mode)
        state.keymaps.register_binding(
            Binding(
                mode=mode,
                sequence=KeySequence.parse(sequence),
                command=_require_command(command, "bind"),
                source=self._origin or "host",
            )
        )

    def unbind(self, sequence: str, mode: str) -> bool:
        removed = self.engine.state.keymaps.unregister_binding(
            mode, KeySequence.parse(sequence)
        )
        return removed is not None

    def clear_bindings(self, mode: Optional[str] = None) -> int:
        return self.engine.state.keymaps.clear(mode)

    # client settings ---------------------------------------------------

    def set_host(self, name: str) -> None:
        self.engine.state.settings.host = _require_text(name, "host")

    def set_user(self, name: str) -> None:
        self.engine.state.settings.user = _require_text(name, "user")

    def set_notification_style(self, style: str) -> None:
        if style not in NOTIFICATION_STYLES:
            raise ValueError(
                f"Invalid notification style '{style}' "
                f"(expected one of {', '.join(NOTIFICATION_STYLES)})"
            )
        self.engine.state.settings.notification_style = style

    def set_file_open_program(self, program: str) -> None:
        self.engine.state.settings.file_open_program = _require_text(program, "file_open_program")

    def set_url_open_program(self, program: str) -> None:
        self.engine.state.settings.url_open_program = _require_text(program, "url_open_program")

    def set_user_color(self, user_id: str, color: int) -> None:
        if isinstance(color, bool) or not isinstance(color, int) or not 0 <= color <= 255:
            raise ValueError(f"ANSI color must be an integer in 0..255, got {color!r}")
        self.engine.state.settings.user_colors[_require_text(user_id, "user_color_ansi")] = color


def _describe(exc: BaseException) -> str:
    if isinstance(exc, SystemExit):
        return f"script called exit({exc.code!r})"
    return str(exc) or type(exc).__name__


def _require_command(command: Any, where: str) -> Callable[..., Any]:
    if not callable(command):
        raise TypeError(f"'{where}' expects a command, got {type(command).__name__}")
    return command


def _require_text(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{where}' expects a non-empty string")
    return value


__all__ = ["BASE_CONFIG", "ScriptBridge", "base_config_source"]
