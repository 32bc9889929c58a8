"""Platform collaborators for location providers and authorization.

The host application supplies concrete implementations. ``InProcessLocationPlatform``
is a thread-safe in-process implementation for hosts that receive fixes
from their own source (a daemon socket, a replay file, a test) and push them
in with ``deliver``.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional, Protocol, Set, runtime_checkable

from sensor_logger.core.logging_utils import get_module_logger
from ..types import (
    ProviderDisabled,
    ProviderEnabled,
    ProviderEvent,
    ProviderId,
    RawLocation,
    ReadingReceived,
    StatusChanged,
)

logger = get_module_logger(__name__)


@runtime_checkable
class LocationListener(Protocol):
    def on_event(self, event: ProviderEvent) -> None:
        ...


class AuthorizationChecker(ABC):
    @abstractmethod
    def has_location_permission(self) -> bool:
        """True if fine or coarse location access is granted."""


class LocationPlatform(ABC):
    """Subscription surface of the platform's location service."""

    @abstractmethod
    def list_supported_providers(self) -> Set[ProviderId]:
        ...

    @abstractmethod
    def request_location_updates(
        self,
        provider_id: ProviderId,
        min_time_ms: int,
        min_distance_m: float,
        listener: LocationListener,
    ) -> None:
        """Register ``listener`` with one provider.

        Raises:
            PermissionError: location access was revoked.
        """

    @abstractmethod
    def remove_updates(self, provider_id: ProviderId, listener: LocationListener) -> None:
        ...


class StaticAuthorization(AuthorizationChecker):
    """Authorization answer fixed by the host (e.g. after its own prompt)."""

    def __init__(self, granted: bool = True) -> None:
        self.granted = granted

    def has_location_permission(self) -> bool:
        return self.granted


class InProcessLocationPlatform(LocationPlatform):
    """Fan-out of pushed fixes to the listeners registered per provider."""

    def __init__(
        self,
        providers: Iterable[ProviderId] = (ProviderId.PRIMARY, ProviderId.SECONDARY),
        authorization: Optional[AuthorizationChecker] = None,
    ) -> None:
        self._providers: Set[ProviderId] = set(providers)
        self._authorization = authorization
        self._listeners: Dict[ProviderId, LocationListener] = {}
        self._cadence: Dict[ProviderId, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def list_supported_providers(self) -> Set[ProviderId]:
        return set(self._providers)

    def request_location_updates(
        self,
        provider_id: ProviderId,
        min_time_ms: int,
        min_distance_m: float,
        listener: LocationListener,
    ) -> None:
        if self._authorization is not None and not self._authorization.has_location_permission():
            raise PermissionError(f"Location permission revoked for {provider_id.value}")
        if provider_id not in self._providers:
            raise ValueError(f"Unsupported provider: {provider_id.value}")
        with self._lock:
            self._listeners[provider_id] = listener
            self._cadence[provider_id] = (min_time_ms, min_distance_m)
        logger.debug(
            "Registered %s listener (min_time=%dms, min_distance=%.1fm)",
            provider_id.value,
            min_time_ms,
            min_distance_m,
        )

    def remove_updates(self, provider_id: ProviderId, listener: LocationListener) -> None:
        with self._lock:
            if self._listeners.get(provider_id) is listener:
                del self._listeners[provider_id]
                self._cadence.pop(provider_id, None)

    def is_registered(self, provider_id: ProviderId) -> bool:
        with self._lock:
            return provider_id in self._listeners

    def cadence(self, provider_id: ProviderId) -> Optional[tuple[int, float]]:
        with self._lock:
            return self._cadence.get(provider_id)

    # ------------------------------------------------------------------
    # Event injection

    def deliver(self, provider_id: ProviderId, location: Optional[RawLocation]) -> bool:
        """Push a fix to the provider's listener. False if nobody listens."""
        return self._dispatch(provider_id, ReadingReceived(provider_id, location))

    def set_status(self, provider_id: ProviderId, status: int, **extras) -> bool:
        return self._dispatch(provider_id, StatusChanged(provider_id, status, dict(extras)))

    def set_provider_enabled(self, provider_id: ProviderId, enabled: bool) -> bool:
        event = ProviderEnabled(provider_id) if enabled else ProviderDisabled(provider_id)
        return self._dispatch(provider_id, event)

    def _dispatch(self, provider_id: ProviderId, event: ProviderEvent) -> bool:
        with self._lock:
            listener = self._listeners.get(provider_id)
        if listener is None:
            return False
        listener.on_event(event)
        return True


__all__ = [
    "AuthorizationChecker",
    "InProcessLocationPlatform",
    "LocationListener",
    "LocationPlatform",
    "StaticAuthorization",
]
