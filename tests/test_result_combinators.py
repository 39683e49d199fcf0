from typing import Callable, List

import pytest

from chatvim.actions import NOOP, OK, Result, invoke, res_error, run_all, run_first
from chatvim.errors import CommandError


def recorder(log: List[str], name: str, result: Result) -> Callable[[object], Result]:
    def command(_context: object) -> Result:
        log.append(name)
        return result

    command.__qualname__ = name
    return command


def test_run_first_returns_first_non_noop() -> None:
    log: List[str] = []
    chain = run_first(
        [recorder(log, "a", NOOP), recorder(log, "b", NOOP), recorder(log, "c", OK)]
    )

    assert chain(object()) == OK
    assert log == ["a", "b", "c"]


def test_run_first_stops_at_error() -> None:
    log: List[str] = []
    failure = res_error("boom")
    chain = run_first(
        [recorder(log, "a", NOOP), recorder(log, "b", failure), recorder(log, "c", OK)]
    )

    assert chain(object()) == failure
    assert log == ["a", "b"]


def test_run_first_all_noop_is_noop() -> None:
    chain = run_first([recorder([], "a", NOOP), recorder([], "b", NOOP)])

    assert chain(object()).is_noop()


def test_run_all_halts_on_error() -> None:
    log: List[str] = []
    chain = run_all(
        [
            recorder(log, "first", OK),
            recorder(log, "second", OK),
            recorder(log, "third", res_error("bad range")),
            recorder(log, "fourth", OK),
        ]
    )

    result = chain(object())

    assert result.is_error()
    assert result.message == "bad range"
    assert log == ["first", "second", "third"]


def test_run_all_returns_last_result() -> None:
    chain = run_all([recorder([], "a", OK), recorder([], "b", NOOP)])

    assert chain(object()).is_noop()
    assert run_all([])(object()).is_noop()


def test_raising_command_becomes_error_and_halts_chain() -> None:
    log: List[str] = []

    def explode(_context: object) -> Result:
        raise KeyError("missing")

    chain = run_all([explode, recorder(log, "after", OK)])
    result = chain(object())

    assert result.is_error()
    assert "missing" in (result.message or "")
    assert log == []


def test_command_error_message_is_kept() -> None:
    def refuse(_context: object) -> Result:
        raise CommandError("No current room")

    assert invoke(refuse, object()) == res_error("No current room")


def test_invoke_coerces_return_values() -> None:
    assert invoke(lambda _context: None, object()) == OK

    wrong = invoke(lambda _context: 42, object())
    assert wrong.is_error()
    assert "not a result" in (wrong.message or "")


def test_combinators_reject_non_commands() -> None:
    with pytest.raises(TypeError, match="Argument 2 of 'run_all' is not a command"):
        run_all([recorder([], "a", OK), "quit"])  # type: ignore[list-item]
    with pytest.raises(TypeError):
        run_first(recorder([], "a", OK))  # type: ignore[arg-type]


def test_result_invariants() -> None:
    assert res_error("").message == "Unknown error"
    assert repr(res_error("x")) == "Error('x')"
    with pytest.raises(ValueError):
        Result("ok", "unexpected")
