"""Location provider collaborators and subscription management."""

from .manager import FALLBACK_ORDER, ProviderManager, ReadingConsumer
from .platform import (
    AuthorizationChecker,
    InProcessLocationPlatform,
    LocationListener,
    LocationPlatform,
    StaticAuthorization,
)

__all__ = [
    "AuthorizationChecker",
    "FALLBACK_ORDER",
    "InProcessLocationPlatform",
    "LocationListener",
    "LocationPlatform",
    "ProviderManager",
    "ReadingConsumer",
    "StaticAuthorization",
]
