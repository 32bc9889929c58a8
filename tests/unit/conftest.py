"""Unit test fixtures for the GPS recording pipeline.

Provides in-process collaborators so every test runs without a location
service or a mobile host:
- a fixed clock source
- an in-process location platform with both providers
- local capture storage in direct and scoped mode
- a raw fix factory
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest

from sensor_logger.modules.GPS.gps_core.clock import ClockSource
from sensor_logger.modules.GPS.gps_core.providers import (
    InProcessLocationPlatform,
    StaticAuthorization,
)
from sensor_logger.modules.GPS.gps_core.storage import LocalCaptureStorage
from sensor_logger.modules.GPS.gps_core.types import RawLocation


SESSION_TIMESTAMP = datetime(2024, 5, 17, 14, 30, 5)


class SteppingClock:
    """Clock callable returning 1000, 2000, 3000, ... nanoseconds."""

    def __init__(self, start: int = 1000, step: int = 1000) -> None:
        self.value = start - step
        self.step = step

    def __call__(self) -> int:
        self.value += self.step
        return self.value


@pytest.fixture
def session_timestamp() -> datetime:
    return SESSION_TIMESTAMP


@pytest.fixture
def clock() -> ClockSource:
    return ClockSource(SteppingClock())


@pytest.fixture
def authorization() -> StaticAuthorization:
    return StaticAuthorization(granted=True)


@pytest.fixture
def platform() -> InProcessLocationPlatform:
    return InProcessLocationPlatform()


@pytest.fixture
def direct_storage(tmp_path: Path) -> LocalCaptureStorage:
    return LocalCaptureStorage(tmp_path / "captures")


@pytest.fixture
def scoped_storage(tmp_path: Path) -> LocalCaptureStorage:
    return LocalCaptureStorage(tmp_path / "captures", use_scoped_storage=True)


@pytest.fixture
def make_fix() -> Callable[..., RawLocation]:
    """Factory for raw fixes with a boot-relative stamp by default."""
    counter = iter(range(1, 1_000_000))

    def _make(**overrides) -> RawLocation:
        n = next(counter)
        values = dict(
            latitude=48.1173 + n * 1e-4,
            longitude=11.5166 + n * 1e-4,
            altitude=545.4,
            accuracy=3.5,
            speed=12.25,
            bearing=84.5,
            elapsed_realtime_ns=n * 100_000_000,
        )
        values.update(overrides)
        return RawLocation(**values)

    return _make