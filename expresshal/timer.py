"""One-shot timers that call back after a delay unless stopped."""

from __future__ import annotations

import enum
import errno
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

TimerCallback = Callable[[Any, int], None]


class TimerState(enum.IntEnum):
    """Life cycle of a timer."""

    READY = 100
    WAITING = 101
    DONE = 102
    ABORT = 103


class LocTimer:
    """Calls ``callback(user_data, errno.ETIMEDOUT)`` on a worker thread
    ``msec`` milliseconds after ``start``, unless ``stop`` comes first."""

    def __init__(self, msec: int, callback: TimerCallback, user_data: Any = None) -> None:
        if callback is None or msec <= 0:
            logger.error("loc_timer: wrong parameters")
            raise ValueError("callback must be given and msec must be positive")
        self.msec = msec
        self.callback = callback
        self.user_data = user_data
        self.state = TimerState.READY
        self._cond = threading.Condition()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "LocTimer":
        """Start the timer thread; a timer can be started only once."""
        if self._thread is not None:
            raise RuntimeError("timer already started")
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        return self

    def _run(self) -> None:
        timed_out = False
        with self._cond:
            if self.state is TimerState.READY:
                self.state = TimerState.WAITING
                stopped = self._cond.wait_for(
                    lambda: self.state is TimerState.ABORT, self.msec / 1000
                )
                timed_out = not stopped
                self.state = TimerState.DONE
        if timed_out:
            logger.debug("loc_timer timed out")
            self.callback(self.user_data, errno.ETIMEDOUT)
        else:
            logger.debug("loc_timer stopped")

    def stop(self) -> None:
        """Cancel the timer if it has not fired yet."""
        with self._cond:
            if self.state in (TimerState.READY, TimerState.WAITING):
                self.state = TimerState.ABORT
                self._cond.notify()


def start_timer(msec: int, callback: TimerCallback, user_data: Any = None) -> LocTimer:
    """Create and start a timer; returns it so that it can be stopped."""
    return LocTimer(msec, callback, user_data).start()