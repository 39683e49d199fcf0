from typing import List

import pytest

from chatvim.actions import OK, Result, res_error
from chatvim.errors import ModeDefinitionError, ModeNotFound
from chatvim.modes import ModeRegistry, ModeStack


def make_stack(*, switch_runs_enter_hooks: bool = True) -> tuple[ModeStack, List[str]]:
    registry = ModeRegistry()
    registry.define_mode("visual", "normal")
    registry.define_mode("react", "command")
    calls: List[str] = []

    def hook(label: str, result: Result = OK):
        def command(_context: object) -> Result:
            calls.append(label)
            return result

        return command

    registry.set_on_enter("visual", hook("enter visual"))
    registry.set_on_leave("visual", hook("leave visual"))
    registry.set_on_enter("react", hook("enter react"))
    registry.set_on_leave("react", hook("leave react", res_error("leave failed")))
    stack = ModeStack(
        registry,
        hook_runner=lambda command: command(None),
        switch_runs_enter_hooks=switch_runs_enter_hooks,
    )
    return stack, calls


def test_pop_at_base_is_noop() -> None:
    stack, calls = make_stack()

    result = stack.pop()

    assert result.is_noop()
    assert stack.depth == 1
    assert stack.top == "normal"
    assert stack.generation == 0
    assert calls == []


def test_push_and_pop_run_hooks() -> None:
    stack, calls = make_stack()

    assert stack.push("visual").is_ok()
    assert stack.modes == ("normal", "visual")
    assert stack.pop().is_ok()
    assert calls == ["enter visual", "leave visual"]
    assert stack.generation == 2


def test_switch_runs_enter_hooks_when_enabled() -> None:
    stack, calls = make_stack(switch_runs_enter_hooks=True)
    stack.push("visual")

    stack.switch("react")

    assert stack.modes == ("normal", "react")
    assert calls == ["enter visual", "leave visual", "enter react"]


def test_switch_skips_enter_hooks_when_disabled() -> None:
    stack, calls = make_stack(switch_runs_enter_hooks=False)
    stack.push("visual")

    stack.switch("react")

    assert stack.modes == ("normal", "react")
    assert calls == ["enter visual", "leave visual"]


def test_switch_from_base_pushes() -> None:
    stack, _calls = make_stack()

    stack.switch("visual")

    assert stack.modes == ("normal", "visual")


def test_hook_error_is_returned_after_transition() -> None:
    stack, _calls = make_stack()
    stack.push("react")

    result = stack.pop()

    assert result.is_error()
    assert result.message == "leave failed"
    assert stack.depth == 1


def test_unknown_mode_is_rejected_without_side_effects() -> None:
    stack, _calls = make_stack()

    with pytest.raises(ModeNotFound, match="Mode 'nowhere' is not defined"):
        stack.push("nowhere")
    with pytest.raises(ModeNotFound):
        stack.switch("nowhere")
    assert stack.depth == 1
    assert stack.generation == 0


def test_reset_returns_to_base() -> None:
    stack, _calls = make_stack()
    stack.push("visual")
    stack.push("react")

    stack.reset()

    assert stack.modes == ("normal",)


def test_mode_definitions() -> None:
    registry = ModeRegistry()
    registry.define_mode("visual", "normal")

    assert registry.define_mode("visual", "normal").parent == "normal"
    assert registry.chain("visual") == ("visual", "normal")
    assert registry.input_target("command") == "auxline"
    with pytest.raises(ModeDefinitionError):
        registry.define_mode("visual", "insert")
    with pytest.raises(ModeNotFound):
        registry.define_mode("orphan", "missing")
    with pytest.raises(ModeDefinitionError):
        registry.define_mode("")


def test_input_target_is_inherited() -> None:
    registry = ModeRegistry()
    registry.define_mode("insert-line", "insert")
    registry.define_mode("limit", "command")

    assert registry.input_target("insert-line") == "buffer"
    assert registry.input_target("limit") == "auxline"
    assert registry.input_target("normal") is None
