"""Subscription management for redundant location providers."""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Sequence

from sensor_logger.core.logging_utils import get_module_logger
from ..constants import MIN_DISTANCE_M, MIN_TIME_MS
from ..errors import LocationUnauthorizedError, ProviderUnavailableError
from ..types import (
    ProviderDisabled,
    ProviderEnabled,
    ProviderEvent,
    ProviderId,
    ProviderSubscription,
    RawLocation,
    ReadingReceived,
    StatusChanged,
)
from .platform import AuthorizationChecker, LocationPlatform

logger = get_module_logger(__name__)

ReadingConsumer = Callable[[ProviderId, Optional[RawLocation]], None]

# Subscription order: primary first, secondary as fallback/supplement
FALLBACK_ORDER = (ProviderId.PRIMARY, ProviderId.SECONDARY)


class ProviderManager:
    """Subscribes to the primary and secondary providers and forwards fixes.

    Both providers feed the same consumer; fixes are not reconciled or
    de-duplicated across providers. The manager does not normalize or
    serialize anything, it only tags each raw fix with its provider id.
    """

    def __init__(
        self,
        platform: LocationPlatform,
        authorization: AuthorizationChecker,
        consumer: Optional[ReadingConsumer] = None,
        *,
        min_time_ms: int = MIN_TIME_MS,
        min_distance_m: float = MIN_DISTANCE_M,
        providers: Sequence[ProviderId] = FALLBACK_ORDER,
    ) -> None:
        self._platform = platform
        self._order = tuple(pid for pid in FALLBACK_ORDER if pid in providers)
        self._authorization = authorization
        self._consumer = consumer
        self.min_time_ms = min_time_ms
        self.min_distance_m = min_distance_m
        self._subscriptions: Dict[ProviderId, ProviderSubscription] = {}
        self._lock = threading.RLock()

    def set_consumer(self, consumer: Optional[ReadingConsumer]) -> None:
        """Swap the reading consumer without touching subscriptions."""
        self._consumer = consumer

    @property
    def is_listening(self) -> bool:
        with self._lock:
            return any(sub.active for sub in self._subscriptions.values())

    def active_providers(self) -> List[ProviderId]:
        with self._lock:
            return [pid for pid in self._order if self._is_active(pid)]

    def subscriptions(self) -> List[ProviderSubscription]:
        with self._lock:
            return [
                ProviderSubscription(sub.provider_id, sub.active)
                for sub in self._subscriptions.values()
            ]

    # =========================================================================
    # Availability
    # =========================================================================

    def supported_providers(self) -> List[ProviderId]:
        supported = self._platform.list_supported_providers()
        return [pid for pid in self._order if pid in supported]

    def is_available(self) -> bool:
        return ProviderId.PRIMARY in self._platform.list_supported_providers()

    def has_location_permission(self) -> bool:
        return self._authorization.has_location_permission()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def enable(self, *, strict: bool = False) -> bool:
        """Subscribe to every supported provider.

        Returns False when no provider is supported or location access is not
        granted. With ``strict`` those conditions raise instead.

        Raises:
            LocationUnauthorizedError: access was revoked while subscribing.
            Any other platform error is re-raised as is. Either way every
            subscription made by this call has been rolled back.
        """
        logger.debug("enable")
        supported = self.supported_providers()
        if not supported:
            logger.error("No supported location provider available")
            if strict:
                raise ProviderUnavailableError("No supported location provider available")
            return False

        if not self._authorization.has_location_permission():
            logger.error("Location permission not granted")
            if strict:
                raise LocationUnauthorizedError("Location permission not granted")
            return False

        with self._lock:
            registered: List[ProviderId] = []
            for provider_id in supported:
                if self._is_active(provider_id):
                    continue
                try:
                    self._platform.request_location_updates(
                        provider_id,
                        self.min_time_ms,
                        self.min_distance_m,
                        self,
                    )
                except PermissionError as exc:
                    logger.error(
                        "Location permission revoked while subscribing to %s",
                        provider_id.value,
                    )
                    self._rollback(registered)
                    raise LocationUnauthorizedError(
                        f"Location permission revoked while subscribing to {provider_id.value}"
                    ) from exc
                except Exception:
                    logger.error("Failed to subscribe to %s", provider_id.value, exc_info=True)
                    self._rollback(registered)
                    raise
                self._subscriptions[provider_id] = ProviderSubscription(provider_id, active=True)
                registered.append(provider_id)
                logger.info("%s location listener registered", provider_id.value)

        return True

    def disable(self) -> None:
        """Unsubscribe from every provider. Safe to call repeatedly."""
        logger.debug("disable")
        with self._lock:
            active = [pid for pid in self._order if self._is_active(pid)]
            for provider_id in active:
                self._unsubscribe(provider_id)
            if active:
                logger.info("Location listeners removed")

    def _is_active(self, provider_id: ProviderId) -> bool:
        sub = self._subscriptions.get(provider_id)
        return bool(sub and sub.active)

    def _unsubscribe(self, provider_id: ProviderId) -> None:
        try:
            self._platform.remove_updates(provider_id, self)
        except PermissionError:
            logger.error("Permission error removing %s updates", provider_id.value, exc_info=True)
        self._subscriptions.pop(provider_id, None)

    def _rollback(self, provider_ids: List[ProviderId]) -> None:
        for provider_id in provider_ids:
            self._unsubscribe(provider_id)
            logger.debug("Rolled back %s subscription", provider_id.value)

    # =========================================================================
    # Platform callbacks
    # =========================================================================

    def on_event(self, event: ProviderEvent) -> None:
        """Single entry point for every platform callback."""
        if isinstance(event, ReadingReceived):
            self._forward(event)
        elif isinstance(event, StatusChanged):
            logger.debug("onStatusChanged: provider=%s, status=%s", event.provider_id.value, event.status)
        elif isinstance(event, ProviderEnabled):
            logger.debug("onProviderEnabled: %s", event.provider_id.value)
        elif isinstance(event, ProviderDisabled):
            logger.debug("onProviderDisabled: %s", event.provider_id.value)
        else:
            logger.warning("Ignoring unknown provider event %r", event)

    def _forward(self, event: ReadingReceived) -> None:
        with self._lock:
            active = self._is_active(event.provider_id)
        consumer = self._consumer
        if not active or consumer is None:
            return
        try:
            consumer(event.provider_id, event.location)
        except Exception:
            logger.error(
                "Reading consumer failed for %s fix",
                event.provider_id.value,
                exc_info=True,
            )


__all__ = ["FALLBACK_ORDER", "ProviderManager", "ReadingConsumer"]
