from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass
class ScheduledTask:
    callback: Callable[[], None]
    origin: float
    delay: float
    interval: float | None = None
    seq: int = 0
    runs: int = 0
    cancelled: bool = False

    @property
    def due(self) -> float:
        if self.interval is None:
            return self.origin + self.delay
        # Fixed grid so repeated re-arming does not accumulate drift
        return self.origin + self.interval * (self.runs + 1)

    @property
    def active(self) -> bool:
        return not self.cancelled

    def cancel(self) -> None:
        self.cancelled = True


class TaskScheduler:
    """Cooperative scheduler over an explicit clock.

    Nothing runs on its own: the host advances time (once per frame, or
    directly from a test) and every task that came due in that window runs
    in due-time order on the caller's thread. While a callback runs, `now()`
    reports that task's due time.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._tasks: list[ScheduledTask] = []
        self._seq = 0

    def now(self) -> float:
        return self._now

    def _add(self, task: ScheduledTask) -> ScheduledTask:
        self._seq += 1
        task.seq = self._seq
        self._tasks.append(task)
        return task

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        return self._add(ScheduledTask(callback=callback, origin=self._now, delay=delay))

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        return self._add(ScheduledTask(callback=callback, origin=self._now, delay=interval, interval=interval))

    def pending(self) -> int:
        self._tasks = [t for t in self._tasks if t.active]
        return len(self._tasks)

    def _next_due(self, until: float) -> ScheduledTask | None:
        best: ScheduledTask | None = None
        for t in self._tasks:
            if not t.active or t.due > until:
                continue
            if best is None or (t.due, t.seq) < (best.due, best.seq):
                best = t
        return best

    def advance(self, dt: float) -> int:
        """Move the clock forward by `dt` seconds and run what came due."""
        if dt < 0:
            raise ValueError("cannot move the clock backwards")
        target = self._now + dt
        ran = 0
        while True:
            task = self._next_due(target)
            if task is None:
                break
            self._now = max(self._now, task.due)
            if task.interval is None:
                task.cancelled = True
            else:
                task.runs += 1
            task.callback()
            ran += 1
        self._now = target
        self._tasks = [t for t in self._tasks if t.active]
        return ran
