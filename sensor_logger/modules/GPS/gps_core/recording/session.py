"""Recording session state machine.

States::

    IDLE --enable--> LISTENING --start--> RECORDING --stop--> STOPPED
      ^                                                          |
      +------------------------- reset / enable -----------------+

The session exclusively owns its OutputSink. All mutable state lives in one
``_SessionState`` object guarded by a single lock, because provider callbacks
arrive on platform threads while start/stop come from the host.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from sensor_logger.core.logging_utils import get_module_logger
from ..constants import CSV_EXTENSION, RAW_SENSOR_INFO_CATEGORY, SENSOR_NAME
from ..csv_serializer import CsvSerializer
from ..errors import SessionStateError, SinkClosedError, SinkOpenError
from ..normalizer import ReadingNormalizer
from ..output.sinks import OutputSink, open_output_sink
from ..storage import CaptureStorage, ContentResolver, Locator
from ..types import ProviderId, RawLocation

logger = get_module_logger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    RECORDING = "recording"
    STOPPED = "stopped"


_START_STATES = frozenset({SessionState.LISTENING, SessionState.RECORDING, SessionState.STOPPED})
_STOP_STATES = frozenset({SessionState.LISTENING, SessionState.RECORDING})


@dataclass
class SessionStats:
    lines_written: int = 0
    dropped_readings: int = 0
    timestamp_regressions: int = 0
    last_timestamp_ns: Optional[int] = None


@dataclass
class _SessionState:
    state: SessionState = SessionState.IDLE
    sink: Optional[OutputSink] = None
    last_locator: Optional[Locator] = None
    last_file: Optional[Path] = None


class RecordingSession:
    """Ties normalization, serialization and the output sink together."""

    def __init__(
        self,
        storage: CaptureStorage,
        resolver: Optional[ContentResolver] = None,
        *,
        normalizer: Optional[ReadingNormalizer] = None,
        serializer: Optional[CsvSerializer] = None,
        sensor_name: str = SENSOR_NAME,
        extension: str = CSV_EXTENSION,
        category: str = RAW_SENSOR_INFO_CATEGORY,
    ) -> None:
        self._storage = storage
        self._resolver = resolver
        self._normalizer = normalizer or ReadingNormalizer()
        self._serializer = serializer or CsvSerializer()
        self.sensor_name = sensor_name
        self.extension = extension
        self.category = category
        self._state = _SessionState()
        self._stats = SessionStats()
        self._lock = threading.Lock()

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state.state

    def is_recording(self) -> bool:
        with self._lock:
            return self._state.state is SessionState.RECORDING

    @property
    def last_output_locator(self) -> Optional[Locator]:
        """Locator of the most recently opened output, None before the first."""
        with self._lock:
            return self._state.last_locator

    @property
    def last_output_file(self) -> Optional[Path]:
        """Concrete file of the most recently opened output, when known."""
        with self._lock:
            return self._state.last_file

    @property
    def stats(self) -> SessionStats:
        with self._lock:
            return SessionStats(**vars(self._stats))

    # =========================================================================
    # State transitions
    # =========================================================================

    def enable(self) -> SessionState:
        """IDLE -> LISTENING. A STOPPED session is reused via IDLE."""
        with self._lock:
            current = self._state.state
            if current is SessionState.STOPPED:
                self._transition(SessionState.IDLE)
                current = SessionState.IDLE
            if current is SessionState.IDLE:
                self._transition(SessionState.LISTENING)
            return self._state.state

    def start_recording(self, session_timestamp: Optional[datetime] = None) -> Locator:
        """Open a fresh output, write the header, and enter RECORDING.

        Calling this while already recording rolls over to a new output: the
        new sink is opened first and the old one is closed only after that
        succeeded.

        Returns:
            Locator of the new output.

        Raises:
            SessionStateError: the session has not been enabled.
            SinkOpenError: the output could not be acquired, opened or
                initialized. The session state is left unchanged.
        """
        session_timestamp = session_timestamp or datetime.now()
        logger.debug("startRecording")

        with self._lock:
            if self._state.state not in _START_STATES:
                raise SessionStateError(
                    f"Cannot start recording from {self._state.state.value} state"
                )

            sink = self._open_sink(session_timestamp)

            previous = self._state.sink
            self._state.sink = sink
            self._state.last_locator = sink.locator
            self._state.last_file = sink.file
            self._stats = SessionStats(dropped_readings=self._stats.dropped_readings)
            self._transition(SessionState.RECORDING)

        if previous is not None:
            self._finalize(previous)
        logger.info("GPS recording started: %s", sink.locator)
        return sink.locator

    def stop_recording(self) -> None:
        """Enter STOPPED and flush/close the sink exactly once.

        Never raises: close failures are logged, the recording is over either
        way.
        """
        logger.debug("stopRecording")
        with self._lock:
            if self._state.state not in _STOP_STATES:
                logger.debug("stop_recording ignored in %s state", self._state.state.value)
                return
            sink, self._state.sink = self._state.sink, None
            stats = SessionStats(**vars(self._stats))
            self._transition(SessionState.STOPPED)
            # Closing under the lock keeps late readings off a closed sink
            if sink is not None:
                self._finalize(sink)

        if sink is not None:
            logger.info(
                "GPS recording stopped: %s (%d lines, %d dropped, %d timestamp regressions)",
                sink.locator,
                stats.lines_written,
                stats.dropped_readings,
                stats.timestamp_regressions,
            )

    def reset(self) -> None:
        """Return to IDLE, closing any open output first."""
        self.stop_recording()
        with self._lock:
            if self._state.state is not SessionState.IDLE:
                self._transition(SessionState.IDLE)

    # =========================================================================
    # Ingestion
    # =========================================================================

    def ingest(self, provider_id: ProviderId, raw: Optional[RawLocation]) -> bool:
        """Persist one raw fix if recording. Returns True if a line was written.

        Safe to call concurrently from several provider delivery threads.
        """
        if raw is None:
            return False

        with self._lock:
            sink = self._state.sink
            if self._state.state is not SessionState.RECORDING or sink is None:
                self._stats.dropped_readings += 1
                return False

            reading = self._normalizer.normalize(raw)
            line = self._serializer.serialize(reading)
            try:
                sink.append(line)
            except (OSError, SinkClosedError):
                logger.error("Failed to append %s reading", provider_id.value, exc_info=True)
                return False

            stats = self._stats
            stats.lines_written += 1
            if stats.last_timestamp_ns is not None and reading.timestamp_ns < stats.last_timestamp_ns:
                stats.timestamp_regressions += 1
                logger.debug(
                    "Timestamp regression from %s: %d < %d",
                    provider_id.value,
                    reading.timestamp_ns,
                    stats.last_timestamp_ns,
                )
            stats.last_timestamp_ns = reading.timestamp_ns

        logger.debug(
            "GPS data recorded: lat=%s, lon=%s, ts=%d (%s)",
            reading.latitude,
            reading.longitude,
            reading.timestamp_ns,
            provider_id.value,
        )
        return True

    __call__ = ingest

    # =========================================================================
    # Internals
    # =========================================================================

    def _transition(self, new_state: SessionState) -> None:
        old_state = self._state.state
        if old_state is new_state:
            return
        self._state.state = new_state
        logger.info("Session %s -> %s", old_state.value, new_state.value)

    def _open_sink(self, session_timestamp: datetime) -> OutputSink:
        sink = open_output_sink(
            self._storage,
            self._resolver,
            self.category,
            self.sensor_name,
            self.extension,
            session_timestamp,
        )
        try:
            sink.append(self._serializer.header)
        except (OSError, SinkClosedError) as exc:
            sink.abort()
            raise SinkOpenError(f"Failed to write header to {sink.locator}: {exc}") from exc
        return sink

    @staticmethod
    def _finalize(sink: OutputSink) -> None:
        try:
            sink.flush_and_close()
        except OSError:
            logger.error("Error closing GPS output %s", sink.locator, exc_info=True)


__all__ = ["RecordingSession", "SessionState", "SessionStats"]
