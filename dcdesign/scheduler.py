"""
dcdesign/scheduler.py
=====================
Cancellable delayed tasks for the autosave debounce.

Two implementations share the ``call_later(delay_s, callback) -> task``
contract:

    ManualScheduler     — virtual clock, advanced explicitly; callbacks run
                          synchronously inside :meth:`ManualScheduler.advance`.
    ThreadingScheduler  — one ``threading.Timer`` per task.
"""

from __future__ import annotations

import threading
from typing import Callable, Protocol


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledTask: ...


# ---------------------------------------------------------------------------
# Virtual clock
# ---------------------------------------------------------------------------

class ManualTask:
    def __init__(self, due_s: float, seq: int, callback: Callable[[], None]) -> None:
        self.due_s = due_s
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler driven by :meth:`advance`.

    Tasks due at the same instant run in the order they were scheduled. A
    task scheduled by a running callback is eligible in the same
    :meth:`advance` call if it falls due within the advanced window.
    """

    def __init__(self, start_s: float = 0.0) -> None:
        self._now_s = start_s
        self._seq = 0
        self._tasks: list[ManualTask] = []

    def now(self) -> float:
        return self._now_s

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ManualTask:
        if delay_s < 0:
            raise ValueError(f"Delay must be non-negative; received delay_s={delay_s!r}")
        self._seq += 1
        task = ManualTask(self._now_s + delay_s, self._seq, callback)
        self._tasks.append(task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every task that falls due.

        Returns:
            Number of callbacks executed.
        """
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards; received seconds={seconds!r}")
        target = self._now_s + seconds
        executed = 0
        while True:
            self._tasks = [t for t in self._tasks if not t.cancelled]
            due = [t for t in self._tasks if t.due_s <= target]
            if not due:
                break
            task = min(due, key=lambda t: (t.due_s, t.seq))
            self._tasks.remove(task)
            self._now_s = max(self._now_s, task.due_s)
            task.callback()
            executed += 1
        self._now_s = target
        return executed


# ---------------------------------------------------------------------------
# Wall clock
# ---------------------------------------------------------------------------

class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_s, callback)
        timer.daemon = True
        timer.start()
        return timer
