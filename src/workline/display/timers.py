from __future__ import annotations

import sched
import time
from typing import Any, Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Single-threaded cooperative timer source the controller runs on."""

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        ...


class _SchedHandle:
    def __init__(self, owner: sched.scheduler, event: sched.Event):
        self._owner = owner
        self._event = event
        self._cancelled = False

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        try:
            self._owner.cancel(self._event)
        except ValueError:
            # Already ran or was removed from the queue.
            pass


class SchedScheduler:
    """``sched``-backed event loop; callbacks run on the thread that calls ``run()``."""

    def __init__(self, timefunc: Callable[[], float] = time.monotonic, delayfunc: Callable[[float], Any] = time.sleep):
        self._sched = sched.scheduler(timefunc, delayfunc)
        self._delayfunc = delayfunc

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        event = self._sched.enter(max(0.0, float(delay)), 0, callback)
        return _SchedHandle(self._sched, event)

    def pending(self) -> int:
        return len(self._sched.queue)

    def run(self) -> None:
        """Run until no timers are left."""
        self._sched.run()

    def run_forever(self, *, idle_seconds: float = 1.0) -> None:
        """Keep serving timers, idling while none are armed. Only an exception (Ctrl+C) ends it."""
        while True:
            self._sched.run()
            self._delayfunc(idle_seconds)
