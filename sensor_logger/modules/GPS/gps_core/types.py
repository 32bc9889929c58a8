"""GPS data types: provider ids, raw platform readings, normalized readings, events."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

import numpy as np


class ProviderId(Enum):
    """Location providers in fallback order."""
    PRIMARY = "gps"        # satellite-based
    SECONDARY = "network"  # network-based fallback


@dataclass(slots=True)
class RawLocation:
    """A location fix as delivered by the platform, fields unvalidated.

    Optional fields left as ``None`` mean the provider did not populate them.
    ``elapsed_realtime_ns`` is the boot-relative clock stamp tied to the fix,
    when the platform exposes one; ``time_ms`` is the wall-clock UTC time.
    """

    latitude: float
    longitude: float
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    speed: Optional[float] = None
    bearing: Optional[float] = None
    elapsed_realtime_ns: Optional[int] = None
    time_ms: Optional[int] = None
    provider: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Reading:
    """One normalized position sample.

    A value of 0.0 in altitude/accuracy/speed/bearing is ambiguous: it is
    either a true zero or the default substituted for a field the provider
    did not report.
    """

    latitude: float
    longitude: float
    altitude: float
    accuracy: np.float32
    speed: np.float32
    bearing: np.float32
    timestamp_ns: int
    approximate_timestamp: bool = False


# ---------------------------------------------------------------------------
# Platform callback events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StatusChanged:
    provider_id: ProviderId
    status: int
    extras: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderEnabled:
    provider_id: ProviderId


@dataclass(frozen=True, slots=True)
class ProviderDisabled:
    provider_id: ProviderId


@dataclass(frozen=True, slots=True)
class ReadingReceived:
    provider_id: ProviderId
    location: Optional[RawLocation]


ProviderEvent = Union[StatusChanged, ProviderEnabled, ProviderDisabled, ReadingReceived]


@dataclass(slots=True)
class ProviderSubscription:
    """Registration of the manager's listener with one provider."""

    provider_id: ProviderId
    active: bool = False


__all__ = [
    "ProviderId",
    "RawLocation",
    "Reading",
    "StatusChanged",
    "ProviderEnabled",
    "ProviderDisabled",
    "ReadingReceived",
    "ProviderEvent",
    "ProviderSubscription",
]
