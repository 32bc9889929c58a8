"""Raw platform location -> fixed-shape Reading."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .clock import ClockSource
from .constants import NS_PER_MS
from .types import RawLocation, Reading

_ZERO32 = np.float32(0.0)


def _as_float64(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def _as_float32(value: Optional[float]) -> np.float32:
    if value is None:
        return _ZERO32
    try:
        result = float(value)
    except (TypeError, ValueError):
        return _ZERO32
    return np.float32(result) if math.isfinite(result) else _ZERO32


def _as_int(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


class ReadingNormalizer:
    """Converts a raw provider reading into a Reading.

    Fields the provider left unset resolve to 0.0 (altitude as float64, the
    rest as float32). Timestamps prefer the boot-relative stamp carried by
    the fix. Without one, wall-clock milliseconds are scaled to nanoseconds;
    those values are approximate and are NOT synchronized with other
    sensors. A fix carrying neither is stamped from the clock source on
    arrival.

    Never raises.
    """

    def __init__(self, clock: Optional[ClockSource] = None) -> None:
        self._clock = clock or ClockSource()

    @property
    def clock(self) -> ClockSource:
        return self._clock

    def normalize(self, raw: RawLocation) -> Reading:
        approximate = False
        elapsed_ns = _as_int(raw.elapsed_realtime_ns)
        time_ms = _as_int(raw.time_ms)
        if elapsed_ns is not None:
            timestamp_ns = elapsed_ns
        elif time_ms is not None:
            timestamp_ns = time_ms * NS_PER_MS
            approximate = True
        else:
            timestamp_ns = self._clock.now_ns()

        return Reading(
            latitude=_as_float64(raw.latitude),
            longitude=_as_float64(raw.longitude),
            altitude=_as_float64(raw.altitude),
            accuracy=_as_float32(raw.accuracy),
            speed=_as_float32(raw.speed),
            bearing=_as_float32(raw.bearing),
            timestamp_ns=timestamp_ns,
            approximate_timestamp=approximate,
        )

    __call__ = normalize


__all__ = ["ReadingNormalizer"]
