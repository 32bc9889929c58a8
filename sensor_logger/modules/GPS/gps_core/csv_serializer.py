"""CSV rendering of GPS readings."""

from __future__ import annotations

import numpy as np

from .constants import CSV_LINE_TERMINATOR, CSV_SEPARATOR, GPS_CSV_HEADER
from .types import Reading

HEADER_LINE = CSV_SEPARATOR.join(GPS_CSV_HEADER) + CSV_LINE_TERMINATOR


def format_float64(value: float) -> str:
    # repr gives the shortest string that round-trips to the same double
    return repr(float(value))


def format_float32(value: np.float32) -> str:
    # numpy prints the shortest string that round-trips to the same float32
    return str(np.float32(value))


class CsvSerializer:
    """Renders readings as ``lat,lon,alt,acc,speed,bearing,timestamp_ns``.

    Fields are numeric only, so no quoting or escaping is applied.
    """

    header = HEADER_LINE

    def serialize(self, reading: Reading) -> str:
        fields = (
            format_float64(reading.latitude),
            format_float64(reading.longitude),
            format_float64(reading.altitude),
            format_float32(reading.accuracy),
            format_float32(reading.speed),
            format_float32(reading.bearing),
            str(int(reading.timestamp_ns)),
        )
        return CSV_SEPARATOR.join(fields) + CSV_LINE_TERMINATOR


__all__ = ["CsvSerializer", "HEADER_LINE", "format_float32", "format_float64"]
