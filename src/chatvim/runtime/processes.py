"""External opener processes (``xdg-open`` and friends)."""

from __future__ import annotations

import subprocess
from typing import List, Sequence

from . import telemetry


class ProcessOpener:
    """Starts detached opener processes and reaps the ones that finished.

    Children are polled on every launch and on :meth:`reap`, which the engine
    calls while draining backend events, so none linger as zombies.
    """

    def __init__(self) -> None:
        self._children: List[subprocess.Popen[bytes]] = []

    def __call__(self, argv: Sequence[str]) -> subprocess.Popen[bytes]:
        self.reap()
        child = subprocess.Popen(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        self._children.append(child)
        telemetry.record_event(
            "process.started", level="debug", data={"argv": list(argv), "pid": child.pid}
        )
        return child

    @property
    def children(self) -> tuple[subprocess.Popen[bytes], ...]:
        return tuple(self._children)

    @property
    def running(self) -> int:
        return len(self._children)

    def reap(self) -> int:
        """Collect exited children, returning how many were reaped."""

        alive = []
        for child in self._children:
            if child.poll() is None:
                alive.append(child)
            else:
                telemetry.record_event(
                    "process.exited",
                    level="debug",
                    data={"pid": child.pid, "returncode": child.returncode},
                )
        reaped = len(self._children) - len(alive)
        self._children = alive
        return reaped


default_opener = ProcessOpener()


__all__ = ["ProcessOpener", "default_opener"]
