"""Run something at most once per period."""

from __future__ import annotations

import threading
import time
from typing import Callable


class Throttle:
    """Lets ``next()`` succeed at most once per ``period`` seconds."""

    def __init__(self, period: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._period = period
        self._clock = clock
        self._last: float | None = None
        self._lock = threading.Lock()

    def next(self) -> bool:
        """Return True if the period since the last success has elapsed."""
        now = self._clock()
        with self._lock:
            if self._last is not None and now - self._last < self._period:
                return False
            self._last = now
            return True

    def reset(self) -> None:
        """Make the following ``next()`` succeed."""
        with self._lock:
            self._last = None

    def set(self, moment: float) -> None:
        """Make ``next()`` succeed only from ``moment`` on (same clock)."""
        with self._lock:
            self._last = moment - self._period