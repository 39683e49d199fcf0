"""Incremental key-sequence dispatch against the active mode chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Literal, Optional

from chatvim.actions.result import Result
from chatvim.keymaps import Binding, KeyChord, KeymapResolver
from chatvim.runtime import telemetry

from .registry import InputTarget, ModeRegistry
from .stack import ModeStack

if TYPE_CHECKING:  # pragma: no cover
    from chatvim.actions.result import Command

Executor = Callable[["Command"], Result]
InputHandler = Callable[[InputTarget, KeyChord], Optional[Result]]
ErrorReporter = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """What a single key press did.

    ``input`` means no binding applied and the chord edited the mode's input
    target instead.
    """

    status: Literal["match", "pending", "miss", "input"]
    mode: str
    result: Optional[Result] = None
    binding: Optional[Binding] = None
    pending: tuple[str, ...] = ()


class KeyDispatcher:
    """Buffers chords until they resolve to a binding in the mode chain.

    A mismatch clears the buffer; when the buffer held several chords the
    newest chord is retried alone, so ``q`` still quits right after an
    aborted ``g`` prefix. The buffer is also dropped whenever the mode stack
    changes.
    """

    def __init__(
        self,
        modes: ModeRegistry,
        stack: ModeStack,
        resolver: KeymapResolver,
        *,
        execute: Executor,
        report_error: ErrorReporter,
        handle_input: Optional[InputHandler] = None,
    ) -> None:
        self.modes = modes
        self.stack = stack
        self.resolver = resolver
        self._execute = execute
        self._report_error = report_error
        self._handle_input = handle_input
        self._pending: list[KeyChord] = []
        self._generation = stack.generation

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(chord.token for chord in self._pending)

    def reset(self) -> None:
        self._pending.clear()
        self._generation = self.stack.generation

    def handle(self, chord: KeyChord) -> DispatchResult:
        if self._generation != self.stack.generation:
            self.reset()
        mode = self.stack.top
        with telemetry.span(
            name="dispatch::key",
            component="dispatcher",
            metadata={"key": chord.token, "mode": mode},
        ) as handle:
            chain = self.modes.chain(mode)
            self._pending.append(chord)
            resolution = self.resolver.resolve(chain, self.pending)
            if resolution.status == "miss" and len(self._pending) > 1:
                handle.add_metadata("retried", True)
                self._pending = [chord]
                resolution = self.resolver.resolve(chain, self.pending)

            if resolution.status == "pending":
                handle.add_metadata("status", "pending")
                return DispatchResult(status="pending", mode=mode, pending=self.pending)

            self._pending.clear()
            if resolution.status == "match" and resolution.binding is not None:
                handle.add_metadata("status", "match")
                handle.add_metadata("sequence", resolution.binding.key_signature)
                result = self._finish(self._execute(resolution.binding.command))
                return DispatchResult(
                    status="match", mode=mode, result=result, binding=resolution.binding
                )

            target = self.modes.input_target(mode)
            if target is not None and self._handle_input is not None:
                result = self._handle_input(target, chord)
                if result is not None:
                    handle.add_metadata("status", "input")
                    return DispatchResult(
                        status="input", mode=mode, result=self._finish(result)
                    )
            handle.add_metadata("status", "miss")
            return DispatchResult(status="miss", mode=mode)

    def _finish(self, result: Result) -> Result:
        self._generation = self.stack.generation
        if result.is_error():
            self._report_error(result.message or "Unknown error")
        return result


__all__ = ["DispatchResult", "KeyDispatcher"]
