"""
Countdown timer used by game handlers for phase deadlines.

Ticks are delivered through a TaskScheduler so that every callback runs
inside the hub's serialized event stream.
"""

import logging
from typing import Callable, Optional

from .scheduler import ScheduledCall, cancel_call

logger = logging.getLogger(__name__)


class CountdownTimer:
    """
    Counts down whole intervals and reports each tick.

    `on_tick(remaining)` fires once per elapsed interval while running, the
    last one reporting 0. `on_complete()` then fires exactly once and the
    timer stops. Nothing fires after `stop()`.
    """

    def __init__(self, scheduler, duration: int,
                 on_tick: Optional[Callable[[int], None]] = None,
                 on_complete: Optional[Callable[[], None]] = None,
                 interval: float = 1.0):
        """
        Initialize timer.

        Args:
            scheduler: Scheduler providing call_later
            duration: Number of intervals to count down
            on_tick: Called with the remaining count after each interval
            on_complete: Called once when the count reaches zero
            interval: Seconds per tick
        """
        self.scheduler = scheduler
        self.duration = max(0, int(duration))
        self.remaining = self.duration
        self.on_tick = on_tick
        self.on_complete = on_complete
        self.interval = interval
        self._running = False
        self._pending: Optional[ScheduledCall] = None

    def start(self):
        """Start or resume the countdown. No-op while already running."""
        if self._running:
            return

        if self.remaining <= 0:
            self.remaining = self.duration

        self._running = True
        self._schedule_next()

    def stop(self):
        """Stop the countdown, keeping the remaining time."""
        self._running = False
        cancel_call(self._pending)
        self._pending = None

    def reset(self):
        """Stop and restore the full duration."""
        self.stop()
        self.remaining = self.duration

    def get_remaining(self) -> int:
        return self.remaining

    def is_running(self) -> bool:
        return self._running

    def _schedule_next(self):
        self._pending = self.scheduler.call_later(self.interval, self._on_interval)

    def _on_interval(self):
        call = self._pending
        if not self._running:
            return

        self.remaining = max(0, self.remaining - 1)

        if self.on_tick:
            self.on_tick(self.remaining)

        # on_tick may have stopped or restarted the timer
        if not self._running or self._pending is not call:
            return

        if self.remaining <= 0:
            self.stop()
            if self.on_complete:
                self.on_complete()
            return

        self._schedule_next()
