"""Shared helpers for capture output filename conventions."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Collection


def sanitize_path_component(value: str) -> str:
    """
    Make ``value`` safe to embed in a filename.

    Converts to lowercase, strips leading slashes, maps path separators and
    colons to underscores, drops whitespace and brackets, and collapses
    repeated underscores.

    Args:
        value: Raw identifier (e.g., "/dev/ttyUSB0", "GPS:primary")

    Returns:
        Sanitized string safe for filenames (e.g., "dev_ttyusb0", "gps_primary")
    """
    safe = value.lstrip("/").lower()
    safe = safe.replace("/", "_").replace("\\", "_").replace(":", "_")
    safe = re.sub(r"[\s()\[\]]", "", safe)
    safe = re.sub(r"_+", "_", safe)
    return safe.strip("_") or "sensor"


def capture_filename(
    session_timestamp: datetime,
    sensor_name: str,
    extension: str,
    *,
    prefix: str = "",
) -> str:
    """
    Build the deterministic ``{prefix}{YYYYmmdd_HHMMSS}_{sensor}.{ext}`` name
    for a capture side-file recorded alongside a session.
    """
    stamp = session_timestamp.strftime("%Y%m%d_%H%M%S")
    sensor = sanitize_path_component(sensor_name)
    ext = extension.lstrip(".").lower() or "dat"
    return f"{prefix}{stamp}_{sensor}.{ext}"


def unique_path(directory: Path, filename: str, taken: Collection[Path] = ()) -> Path:
    """Return ``directory / filename``, suffixed ``_1``, ``_2``... if taken.

    A name is taken when it exists on disk or appears in ``taken``.
    """
    candidate = directory / filename
    if not candidate.exists() and candidate not in taken:
        return candidate
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while True:
        candidate = directory / f"{stem}_{counter}{suffix}"
        if not candidate.exists() and candidate not in taken:
            return candidate
        counter += 1


__all__ = [
    "capture_filename",
    "sanitize_path_component",
    "unique_path",
]
