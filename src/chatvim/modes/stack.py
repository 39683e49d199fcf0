"""Activation stack of modes with enter/leave hooks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

from chatvim.actions.result import NOOP, OK, Result
from chatvim.runtime import telemetry

from .registry import BASE_MODE, ModeRegistry

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.actions.result import Command

HookRunner = Callable[["Command"], Result]


class ModeStack:
    """Non-empty stack whose bottom is the permanent base mode.

    Every transition bumps :attr:`generation`; the key dispatcher compares it
    to drop half-typed sequences when the active mode changes underneath it.
    Hook failures are returned to the caller, the transition itself has
    already happened by then.
    """

    def __init__(
        self,
        registry: ModeRegistry,
        *,
        base_mode: str = BASE_MODE,
        hook_runner: Optional[HookRunner] = None,
        switch_runs_enter_hooks: bool = True,
    ) -> None:
        registry.get(base_mode)
        self.registry = registry
        self.base_mode = base_mode
        self.hook_runner = hook_runner
        self.switch_runs_enter_hooks = switch_runs_enter_hooks
        self._stack: list[str] = [base_mode]
        self.generation = 0

    @property
    def top(self) -> str:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def modes(self) -> tuple[str, ...]:
        return tuple(self._stack)

    def push(self, name: str) -> Result:
        self.registry.get(name)
        self._stack.append(name)
        self._touch("push", name)
        return self._run_hook(self.registry.get(name).on_enter)

    def pop(self) -> Result:
        if len(self._stack) == 1:
            return NOOP
        name = self._stack.pop()
        self._touch("pop", name)
        leave = self._run_hook(self.registry.get(name).on_leave)
        return leave if leave.is_error() else OK

    def switch(self, name: str) -> Result:
        """Replace the top mode with ``name``.

        The base mode is never popped, so switching from depth 1 pushes.
        """

        self.registry.get(name)
        leave: Result = OK
        if len(self._stack) > 1:
            previous = self._stack.pop()
            leave = self._run_hook(self.registry.get(previous).on_leave)
        self._stack.append(name)
        self._touch("switch", name)
        if leave.is_error():
            return leave
        if not self.switch_runs_enter_hooks:
            return OK
        return self._run_hook(self.registry.get(name).on_enter)

    def reset(self) -> None:
        if len(self._stack) > 1:
            del self._stack[1:]
            self._touch("reset", self.base_mode)

    def _touch(self, transition: str, name: str) -> None:
        self.generation += 1
        telemetry.record_event(
            f"mode.{transition}",
            level="debug",
            data={"mode": name, "stack": "/".join(self._stack)},
        )

    def _run_hook(self, hook: Optional["Command"]) -> Result:
        if hook is None or self.hook_runner is None:
            return OK
        result = self.hook_runner(hook)
        return result if result.is_error() else OK


__all__ = ["HookRunner", "ModeStack"]
