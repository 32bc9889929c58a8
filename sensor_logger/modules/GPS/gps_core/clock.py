"""Monotonic, boot-relative nanosecond clock shared with other sensor streams."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


def _boottime_ns() -> int:
    return time.clock_gettime_ns(time.CLOCK_BOOTTIME)


def _default_source() -> Callable[[], int]:
    # CLOCK_BOOTTIME keeps counting through suspend, matching how IMU
    # timestamps are taken; monotonic_ns is the portable fallback.
    if hasattr(time, "CLOCK_BOOTTIME") and hasattr(time, "clock_gettime_ns"):
        return _boottime_ns
    return time.monotonic_ns


class ClockSource:
    """Supplies boot-relative nanosecond timestamps.

    Independent of wall-clock adjustments, so readings stamped here can be
    correlated with other sensors stamped from the same clock. The returned
    values never decrease, even if the underlying source misbehaves.
    """

    def __init__(self, source: Optional[Callable[[], int]] = None) -> None:
        self._source = source or _default_source()
        self._last_ns = 0
        self._lock = threading.Lock()

    def now_ns(self) -> int:
        with self._lock:
            value = int(self._source())
            if value < self._last_ns:
                value = self._last_ns
            self._last_ns = value
            return value


__all__ = ["ClockSource"]
