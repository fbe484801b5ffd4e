"""Monotonic timestamps with nanosecond durations."""

from __future__ import annotations

import time
from dataclasses import dataclass

NANOSECONDS_PER_SECOND = 1_000_000_000

MIN_DURATION = -(1 << 63)
MAX_DURATION = (1 << 63) - 1


def _trunc_divmod(value: int, divisor: int) -> tuple[int, int]:
    """Division truncating toward zero; the remainder takes the dividend's sign."""
    quotient = abs(value) // divisor
    if value < 0:
        quotient = -quotient
    return quotient, value - quotient * divisor


@dataclass(frozen=True, order=True)
class MonotonicTimestamp:
    """A point in time as seconds plus a non-negative nanosecond offset.

    Durations are integers counting nanoseconds.
    """

    sec: int = 0
    nsec: int = 0

    def add(self, d: int) -> MonotonicTimestamp:
        """Return the timestamp moved by ``d`` nanoseconds."""
        whole, rest = _trunc_divmod(d, NANOSECONDS_PER_SECOND)
        sec = self.sec + whole
        nsec = self.nsec + rest
        if nsec >= NANOSECONDS_PER_SECOND:
            sec += 1
            nsec -= NANOSECONDS_PER_SECOND
        elif nsec < 0:
            sec -= 1
            nsec += NANOSECONDS_PER_SECOND
        return MonotonicTimestamp(sec, nsec)

    def sub(self, u: MonotonicTimestamp) -> int:
        """Return ``self - u`` in nanoseconds, clamped to the 64-bit range."""
        d = (self.sec - u.sec) * NANOSECONDS_PER_SECOND + (self.nsec - u.nsec)
        if MIN_DURATION <= d <= MAX_DURATION:
            return d
        return MIN_DURATION if self.before(u) else MAX_DURATION

    def equal(self, u: MonotonicTimestamp) -> bool:
        return self.sec == u.sec and self.nsec == u.nsec

    def before(self, u: MonotonicTimestamp) -> bool:
        return self.sec < u.sec or (self.sec == u.sec and self.nsec < u.nsec)

    def after(self, u: MonotonicTimestamp) -> bool:
        return self.sec > u.sec or (self.sec == u.sec and self.nsec > u.nsec)


def monotonic() -> MonotonicTimestamp:
    """Return the current reading of the monotonic clock."""
    sec, nsec = divmod(time.monotonic_ns(), NANOSECONDS_PER_SECOND)
    return MonotonicTimestamp(sec, nsec)