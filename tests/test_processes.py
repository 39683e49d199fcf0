import sys

from chatvim.chat import LocalBackend
from chatvim.core import Engine
from chatvim.runtime.config import EngineOptions
from chatvim.runtime.processes import ProcessOpener

QUICK_EXIT = [sys.executable, "-c", "pass"]


def test_finished_children_are_reaped() -> None:
    opener = ProcessOpener()

    child = opener(QUICK_EXIT)
    assert opener.running == 1
    child.wait()

    assert opener.reap() == 1
    assert opener.running == 0
    assert opener.reap() == 0


def test_engine_reaps_opened_programs() -> None:
    opener = ProcessOpener()
    engine = Engine.from_options(
        EngineOptions(host="test", user="me"), backend=LocalBackend({}), opener=opener
    )

    engine.open_external(sys.executable, "-V")
    assert opener.running == 1
    for child in opener.children:
        child.wait()
    engine.process_events()

    assert opener.running == 0
