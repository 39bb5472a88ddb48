"""World clock — asyncio-driven scheduler for the periodic world ticks.

Responsibilities:
- Keep simulated time (``now_ms``) used for cooldowns and timestamps
- Fire every registered periodic task when its due time is reached
- Drive simulated time from the wall clock in production (``run``)

Tests drive the clock by calling ``advance`` directly, so tick cadence
never depends on real sleeps.  The clock holds no game rules.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable

log = logging.getLogger(__name__)


@dataclass
class PeriodicTask:
    """A callback fired every ``interval_ms`` of simulated time."""

    name: str
    interval_ms: float
    callback: Callable[[], None]
    next_due_ms: float = 0.0
    fired: int = field(default=0)


class WorldClock:
    """Scheduler of periodic tasks over simulated time.

    Args:
        start_ms: Initial simulated time in milliseconds.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = start_ms
        self._tasks: list[PeriodicTask] = []
        self._running = False

        # --- Debug / monitoring counters ---
        self.tick_count: int = 0
        self.started_at: float = 0.0
        self.last_tick_duration_ms: float = 0.0

    @property
    def now_ms(self) -> float:
        """Current simulated time in milliseconds."""
        return self._now_ms

    @property
    def tasks(self) -> list[PeriodicTask]:
        return list(self._tasks)

    def every(self, interval_ms: float, callback: Callable[[], None],
              name: str = "") -> PeriodicTask:
        """Register ``callback`` to fire every ``interval_ms``.

        The first firing happens one full interval after registration.
        """
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms}")
        task = PeriodicTask(
            name=name or getattr(callback, "__name__", "task"),
            interval_ms=interval_ms,
            callback=callback,
            next_due_ms=self._now_ms + interval_ms,
        )
        self._tasks.append(task)
        log.debug("Periodic task registered: %s every %.0f ms", task.name, interval_ms)
        return task

    def advance(self, elapsed_ms: float) -> int:
        """Move simulated time forward, firing every task that falls due.

        Firings are ordered by due time; tasks due at the same instant
        fire in registration order.  A task whose interval elapsed
        several times fires once per interval.

        Returns the number of firings.
        """
        target = self._now_ms + elapsed_ms
        fired = 0
        while True:
            due = [t for t in self._tasks if t.next_due_ms <= target]
            if not due:
                break
            task = min(due, key=lambda t: t.next_due_ms)
            self._now_ms = task.next_due_ms
            task.next_due_ms += task.interval_ms
            task.fired += 1
            fired += 1
            task.callback()
        self._now_ms = target
        return fired

    # -- Production loop ---------------------------------------------------

    async def run(self) -> None:
        """Drive simulated time from the monotonic clock until stop()."""
        if not self._tasks:
            log.warning("World clock started with no tasks")
        self._running = True
        self.started_at = time.monotonic()
        sleep_s = min((t.interval_ms for t in self._tasks), default=1000.0) / 1000.0
        last = self.started_at
        while self._running:
            await asyncio.sleep(sleep_s)
            now = time.monotonic()
            elapsed_ms = (now - last) * 1000.0
            last = now

            t0 = time.monotonic()
            self.advance(elapsed_ms)
            self.tick_count += 1
            self.last_tick_duration_ms = (time.monotonic() - t0) * 1000.0

    @property
    def uptime_seconds(self) -> float:
        """Seconds since the loop started."""
        if self.started_at == 0.0:
            return 0.0
        return time.monotonic() - self.started_at

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Signal the loop to stop."""
        self._running = False
