"""GPS core package - recording pipeline components."""

from .clock import ClockSource
from .constants import (
    CSV_EXTENSION,
    GPS_CSV_HEADER,
    MIN_DISTANCE_M,
    MIN_TIME_MS,
    RAW_SENSOR_INFO_CATEGORY,
    SENSOR_NAME,
)
from .csv_serializer import HEADER_LINE, CsvSerializer
from .errors import (
    GPSRecorderError,
    LocationUnauthorizedError,
    ProviderUnavailableError,
    SessionStateError,
    SinkClosedError,
    SinkOpenError,
    UriResolutionError,
)
from .normalizer import ReadingNormalizer
from .output import DirectPathSink, OutputSink, ScopedUriSink, open_output_sink
from .providers import (
    AuthorizationChecker,
    InProcessLocationPlatform,
    LocationPlatform,
    ProviderManager,
    StaticAuthorization,
)
from .recording import RecordingSession, SessionState
from .replay import parse_fix_line, replay_fixes
from .storage import (
    AnnounceFlags,
    CaptureStorage,
    ContentResolver,
    LocalCaptureStorage,
    StorageTarget,
)
from .types import ProviderId, RawLocation, Reading

__all__ = [
    # Constants
    "CSV_EXTENSION",
    "GPS_CSV_HEADER",
    "HEADER_LINE",
    "MIN_DISTANCE_M",
    "MIN_TIME_MS",
    "RAW_SENSOR_INFO_CATEGORY",
    "SENSOR_NAME",
    # Types
    "ProviderId",
    "RawLocation",
    "Reading",
    # Errors
    "GPSRecorderError",
    "LocationUnauthorizedError",
    "ProviderUnavailableError",
    "SessionStateError",
    "SinkClosedError",
    "SinkOpenError",
    "UriResolutionError",
    # Pipeline
    "ClockSource",
    "ReadingNormalizer",
    "CsvSerializer",
    "OutputSink",
    "DirectPathSink",
    "ScopedUriSink",
    "open_output_sink",
    # Providers
    "AuthorizationChecker",
    "InProcessLocationPlatform",
    "LocationPlatform",
    "ProviderManager",
    "StaticAuthorization",
    # Session
    "RecordingSession",
    "SessionState",
    # Replay
    "parse_fix_line",
    "replay_fixes",
    # Storage
    "AnnounceFlags",
    "CaptureStorage",
    "ContentResolver",
    "LocalCaptureStorage",
    "StorageTarget",
]
