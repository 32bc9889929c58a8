"""GPS recorder facade.

Handles GPS location recording during a capture session: subscribes to the
location providers, records latitude, longitude, altitude, accuracy, speed,
bearing and timestamp to a CSV file, and stamps readings from the same
boot-relative clock used for IMU sensors so the streams can be aligned.

Example:
    storage = LocalCaptureStorage(Path("captures"))
    recorder = GPSRecorder(platform, authorization, storage)
    if recorder.enable_gps():
        recorder.start_recording(datetime.now())
        ...
        recorder.stop_recording()
        recorder.disable_gps()
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from sensor_logger.core.logging_utils import get_module_logger
from .config import GPSConfig
from .gps_core.clock import ClockSource
from .gps_core.normalizer import ReadingNormalizer
from .gps_core.providers import (
    FALLBACK_ORDER,
    AuthorizationChecker,
    LocationPlatform,
    ProviderManager,
)
from .gps_core.recording import RecordingSession, SessionState
from .gps_core.storage import CaptureStorage, ContentResolver, LocalCaptureStorage, Locator
from .gps_core.types import ProviderId

logger = get_module_logger(__name__)


class GPSRecorder:
    """Single entry point owning the provider manager and recording session."""

    def __init__(
        self,
        platform: LocationPlatform,
        authorization: AuthorizationChecker,
        storage: CaptureStorage,
        resolver: Optional[ContentResolver] = None,
        *,
        config: Optional[GPSConfig] = None,
        clock: Optional[ClockSource] = None,
    ) -> None:
        self.config = config or GPSConfig()
        if resolver is None and isinstance(storage, ContentResolver):
            resolver = storage

        self.clock = clock or ClockSource()
        self.session = RecordingSession(
            storage,
            resolver,
            normalizer=ReadingNormalizer(self.clock),
            sensor_name=self.config.sensor_name,
            extension=self.config.file_extension,
        )
        providers = FALLBACK_ORDER if self.config.use_secondary_provider else (ProviderId.PRIMARY,)
        self.providers = ProviderManager(
            platform,
            authorization,
            self.session.ingest,
            min_time_ms=self.config.min_time_ms,
            min_distance_m=self.config.min_distance_m,
            providers=providers,
        )

    @classmethod
    def from_config(
        cls,
        config: GPSConfig,
        platform: LocationPlatform,
        authorization: AuthorizationChecker,
        *,
        clock: Optional[ClockSource] = None,
    ) -> "GPSRecorder":
        """Build a recorder writing to a LocalCaptureStorage under ``config.output_dir``."""
        storage = LocalCaptureStorage(
            config.output_dir,
            use_scoped_storage=config.use_scoped_storage,
            file_prefix=config.file_prefix,
        )
        return cls(platform, authorization, storage, config=config, clock=clock)

    # =========================================================================
    # Provider lifecycle
    # =========================================================================

    def is_gps_available(self) -> bool:
        """Check if the primary (satellite) provider exists on this platform."""
        return self.providers.is_available()

    def has_location_permission(self) -> bool:
        return self.providers.has_location_permission()

    def enable_gps(self) -> bool:
        """Start listening to location updates. False if unavailable/unauthorized."""
        if not self.providers.enable():
            return False
        self.session.enable()
        return True

    def disable_gps(self) -> None:
        """Stop listening; any active recording is finalized first."""
        self.session.reset()
        self.providers.disable()

    # =========================================================================
    # Recording
    # =========================================================================

    def start_recording(self, session_timestamp: Optional[datetime] = None) -> Locator:
        return self.session.start_recording(session_timestamp)

    def stop_recording(self) -> None:
        self.session.stop_recording()

    def is_recording(self) -> bool:
        return self.session.is_recording()

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def last_gps_file(self) -> Optional[Path]:
        """File of the last recording, resolved from its URI in scoped mode."""
        return self.session.last_output_file

    @property
    def last_output_locator(self) -> Optional[Locator]:
        return self.session.last_output_locator


__all__ = ["GPSRecorder"]
