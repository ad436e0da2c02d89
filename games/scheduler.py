"""
Task scheduling for Party Hub.

Wraps Flask-SocketIO background tasks behind a small interface used by
countdown timers and by game handlers that call external services.
Also owns the lock that serializes socket events, timer callbacks and
service continuations into one logical event stream.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class ScheduledCall:
    """A callback due at a point in time, cancellable until it runs."""

    def __init__(self, callback: Callable, args: tuple = (), due: float = 0.0):
        self.callback = callback
        self.args = args
        self.due = due
        self.cancelled = False
        self.done = False

    def cancel(self):
        """Prevent the callback from running. Safe to call repeatedly."""
        self.cancelled = True

    def run(self) -> Any:
        if self.cancelled or self.done:
            return None
        self.done = True
        return self.callback(*self.args)


class TaskScheduler:
    """
    Scheduler backed by the Socket.IO server's background task support.

    `call_later` callbacks run under the serialization lock. `spawn` targets
    run outside it; they must re-enter with `serialized()` before touching
    session state.
    """

    def __init__(self, socketio=None):
        """
        Initialize scheduler.

        Args:
            socketio: SocketIO instance used for background tasks and sleeping
        """
        self.socketio = socketio
        self.lock = threading.RLock()

    def time(self) -> float:
        """Monotonic clock used for timers and the session sweep."""
        return time.monotonic()

    def serialized(self):
        """Context manager holding the event-stream lock."""
        return self.lock

    def sleep(self, seconds: float):
        if self.socketio is not None:
            self.socketio.sleep(seconds)
        else:
            time.sleep(seconds)

    def spawn(self, target: Callable, *args):
        """Run `target(*args)` in a background task."""
        if self.socketio is not None:
            return self.socketio.start_background_task(target, *args)

        thread = threading.Thread(target=target, args=args, daemon=True)
        thread.start()
        return thread

    def call_later(self, delay: float, callback: Callable, *args) -> ScheduledCall:
        """
        Schedule `callback(*args)` to run after `delay` seconds.

        Args:
            delay: Seconds to wait
            callback: Function to call under the serialization lock

        Returns:
            ScheduledCall handle that can be cancelled
        """
        call = ScheduledCall(callback, args, due=self.time() + delay)
        self.spawn(self._run_later, call, delay)
        return call

    def _run_later(self, call: ScheduledCall, delay: float):
        self.sleep(delay)
        if call.cancelled:
            return

        with self.serialized():
            try:
                call.run()
            except Exception as e:
                logger.error(f"Scheduled callback {getattr(call.callback, '__name__', call.callback)} failed: {e}",
                             exc_info=True)


def cancel_call(call: Optional[ScheduledCall]):
    """Cancel a possibly missing scheduled call."""
    if call is not None:
        call.cancel()
