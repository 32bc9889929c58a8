"""Exception taxonomy for the GPS recording pipeline."""

from __future__ import annotations


class GPSRecorderError(Exception):
    """Base class for all GPS recorder errors."""


class ProviderUnavailableError(GPSRecorderError):
    """No supported location provider exists on this platform."""


class LocationUnauthorizedError(GPSRecorderError, PermissionError):
    """Location access is missing or was revoked mid-subscribe."""


class SinkOpenError(GPSRecorderError, OSError):
    """An output sink could not be created or opened."""


class UriResolutionError(SinkOpenError):
    """A scoped URI did not resolve to a usable file descriptor."""


class SinkClosedError(GPSRecorderError):
    """A line was appended to a sink that was already closed."""


class SessionStateError(GPSRecorderError):
    """A session operation was requested from a state that does not allow it."""


__all__ = [
    "GPSRecorderError",
    "ProviderUnavailableError",
    "LocationUnauthorizedError",
    "SinkOpenError",
    "UriResolutionError",
    "SinkClosedError",
    "SessionStateError",
]
