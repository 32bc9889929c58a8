"""Replay recorded fixes into an in-process location platform.

Input is JSON lines, one fix per line::

    {"provider": "gps", "latitude": 48.1, "longitude": 11.5, "elapsed_realtime_ns": 1000}

``provider`` defaults to the primary provider. Unknown keys are ignored and
malformed lines are skipped with a warning.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import fields
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from sensor_logger.core.logging_utils import get_module_logger
from .providers.platform import InProcessLocationPlatform
from .types import ProviderId, RawLocation

logger = get_module_logger(__name__)

_RAW_FIELDS = frozenset(f.name for f in fields(RawLocation))


def parse_fix_line(line: str) -> Optional[Tuple[ProviderId, RawLocation]]:
    """Parse one JSON line into ``(provider_id, raw)``. None if unusable."""
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Skipping malformed fix line: %s", text[:80])
        return None
    if not isinstance(payload, dict):
        return None

    try:
        provider_id = ProviderId(payload.get("provider", ProviderId.PRIMARY.value))
    except ValueError:
        logger.warning("Skipping fix from unknown provider %r", payload.get("provider"))
        return None

    values = {key: value for key, value in payload.items() if key in _RAW_FIELDS}
    values["provider"] = provider_id.value
    try:
        raw = RawLocation(**values)
        raw.latitude = float(raw.latitude)
        raw.longitude = float(raw.longitude)
    except (TypeError, ValueError):
        logger.warning("Skipping fix without usable coordinates: %s", text[:80])
        return None
    return provider_id, raw


async def replay_fixes(path: Path, platform: InProcessLocationPlatform) -> int:
    """Deliver every fix in ``path`` to ``platform``. Returns fixes delivered.

    Delivery runs the listener chain (and its CSV writes) in a worker thread
    so the event loop stays free while lines are recorded.
    """
    delivered = 0
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        async for line in f:
            parsed = parse_fix_line(line)
            if parsed is None:
                continue
            provider_id, raw = parsed
            if await asyncio.to_thread(platform.deliver, provider_id, raw):
                delivered += 1
    logger.info("Replayed %d fixes from %s", delivered, path)
    return delivered


__all__ = ["parse_fix_line", "replay_fixes"]
