"""Output sinks for recorded CSV lines.

Two variants share one capability set (``append`` / ``flush_and_close``):

- DirectPathSink writes to a concrete filesystem path.
- ScopedUriSink writes through a descriptor obtained for a permission-scoped
  URI, then reports the URI's backing file to the storage collaborator.

Both buffer writes, never emit partial lines, and close at most once.
"""

from __future__ import annotations

import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from sensor_logger.core.logging_utils import get_module_logger
from ..errors import SinkClosedError, SinkOpenError, UriResolutionError
from ..storage import (
    DIRECT_ANNOUNCE_FLAGS,
    SCOPED_ANNOUNCE_FLAGS,
    CaptureStorage,
    ContentResolver,
    Locator,
    StorageTarget,
)

logger = get_module_logger(__name__)

_BUFFER_SIZE = 64 * 1024


class OutputSink(ABC):
    """Owns one writable text stream until ``flush_and_close``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stream: Optional[TextIO] = None
        self._closed = False
        self._lines_written = 0

    @property
    @abstractmethod
    def locator(self) -> Locator:
        """Where the output lives (path or URI)."""

    @property
    def file(self) -> Optional[Path]:
        """Concrete file backing the output, when known."""
        return None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def lines_written(self) -> int:
        return self._lines_written

    @abstractmethod
    def open(self) -> "OutputSink":
        """Acquire the stream. Raises SinkOpenError on failure."""

    def append(self, line: str) -> None:
        """Write one complete line as a single buffered write."""
        with self._lock:
            if self._closed or self._stream is None:
                raise SinkClosedError(f"Sink {self.locator} is not open")
            self._stream.write(line)
            self._lines_written += 1

    def flush_and_close(self) -> None:
        """Flush and close the stream. Later calls are no-ops.

        The sink counts as closed even when flushing or closing raises; the
        error is propagated once to the caller.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            stream, self._stream = self._stream, None
            if stream is None:
                return
            try:
                stream.flush()
            finally:
                stream.close()

    def abort(self) -> None:
        """Close the stream and remove whatever this sink created."""
        with self._lock:
            self._closed = True
            stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.close()
            except OSError:
                logger.debug("Error discarding sink stream for %s", self.locator, exc_info=True)
        try:
            self._remove_output()
        except OSError:
            logger.warning("Could not remove aborted output %s", self.locator, exc_info=True)

    def _remove_output(self) -> None:
        """Delete the backing file. Subclasses that create one override this."""

    def __enter__(self) -> "OutputSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush_and_close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"{type(self).__name__}({self.locator!s}, {state})"


class DirectPathSink(OutputSink):
    """Sink writing straight to a filesystem path."""

    def __init__(self, path: Path, storage: Optional[CaptureStorage] = None) -> None:
        super().__init__()
        self._path = Path(path)
        self._storage = storage

    @property
    def locator(self) -> Path:
        return self._path

    @property
    def file(self) -> Path:
        return self._path

    def open(self) -> "DirectPathSink":
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = open(
                self._path, "w", encoding="utf-8", newline="", buffering=_BUFFER_SIZE
            )
        except OSError as exc:
            raise SinkOpenError(f"Failed to open {self._path}: {exc}") from exc

        logger.debug("Save to: %s", self._path)
        if self._storage is not None:
            try:
                self._storage.announce_new_file(self._path, DIRECT_ANNOUNCE_FLAGS)
            except OSError as exc:
                self.abort()
                raise SinkOpenError(f"Failed to publish {self._path}: {exc}") from exc
        return self

    def _remove_output(self) -> None:
        self._path.unlink(missing_ok=True)


class ScopedUriSink(OutputSink):
    """Sink writing through a descriptor resolved from a scoped URI."""

    def __init__(
        self,
        uri: str,
        resolver: ContentResolver,
        storage: Optional[CaptureStorage] = None,
    ) -> None:
        super().__init__()
        self._uri = uri
        self._resolver = resolver
        self._storage = storage
        self._file: Optional[Path] = None

    @property
    def locator(self) -> str:
        return self._uri

    @property
    def file(self) -> Optional[Path]:
        return self._file

    def open(self) -> "ScopedUriSink":
        try:
            fd = self._resolver.open_file_descriptor(self._uri, "w")
        except OSError as exc:
            raise UriResolutionError(f"Failed to resolve {self._uri}: {exc}") from exc
        if fd is None:
            raise UriResolutionError(f"File descriptor was null for {self._uri}")

        try:
            self._stream = os.fdopen(
                fd, "w", encoding="utf-8", newline="", buffering=_BUFFER_SIZE
            )
        except OSError as exc:
            os.close(fd)
            self.abort()
            raise SinkOpenError(f"Failed to open stream for {self._uri}: {exc}") from exc

        if self._storage is not None:
            try:
                self._file = self._storage.resolve_uri_to_file(self._uri)
                if self._file is not None:
                    self._storage.announce_new_file(self._file, SCOPED_ANNOUNCE_FLAGS)
            except OSError as exc:
                self.abort()
                raise SinkOpenError(f"Failed to publish {self._uri}: {exc}") from exc
        return self

    def _remove_output(self) -> None:
        if self._file is not None:
            self._file.unlink(missing_ok=True)
        else:
            self._resolver.delete(self._uri)


def open_output_sink(
    storage: CaptureStorage,
    resolver: Optional[ContentResolver],
    category: str,
    sensor_name: str,
    extension: str,
    session_timestamp: datetime,
) -> OutputSink:
    """Resolve a capture output and open the sink variant it calls for.

    Raises:
        SinkOpenError: the target could not be resolved or opened.
        UriResolutionError: a scoped target yielded no usable descriptor.
    """
    try:
        target: StorageTarget = storage.resolve_capture_output(
            category, sensor_name, extension, session_timestamp
        )
    except OSError as exc:
        if isinstance(exc, SinkOpenError):
            raise
        raise SinkOpenError(f"Failed to create {sensor_name} capture output: {exc}") from exc

    if target.scoped:
        if resolver is None:
            raise UriResolutionError(f"No content resolver for {target.uri}")
        sink: OutputSink = ScopedUriSink(target.uri, resolver, storage)
    else:
        sink = DirectPathSink(target.path, storage)
    return sink.open()


__all__ = [
    "OutputSink",
    "DirectPathSink",
    "ScopedUriSink",
    "open_output_sink",
]
