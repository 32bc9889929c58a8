"""Storage collaborators: capture output resolution and content resolution.

``CaptureStorage`` turns a logical "capture output file" request into either
a concrete path (direct mode) or a permission-scoped URI (scoped mode).
``ContentResolver`` turns a scoped URI into a writable file descriptor.

``LocalCaptureStorage`` implements both on a local directory so the recorder
can run without a mobile host. In scoped mode it hands out
``content://<authority>/<name>`` URIs that only it can resolve.
"""

from __future__ import annotations

import os
import threading
from collections import deque
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Deque, List, Optional, Set, Tuple, Union
from urllib.parse import quote, unquote, urlsplit

from sensor_logger.core.logging_utils import get_module_logger
from sensor_logger.modules.base.storage_utils import capture_filename, unique_path

logger = get_module_logger(__name__)

Locator = Union[Path, str]

CONTENT_SCHEME = "content"

_ANNOUNCE_HISTORY = 256


@dataclass(frozen=True, slots=True)
class AnnounceFlags:
    """Media-index broadcast flags sent with a newly created artifact."""

    is_new_picture: bool = False
    is_new_video: bool = False
    set_last_scanned: bool = False
    raw_sensor_info: bool = True


DIRECT_ANNOUNCE_FLAGS = AnnounceFlags()
SCOPED_ANNOUNCE_FLAGS = AnnounceFlags(is_new_picture=True, set_last_scanned=True)


@dataclass(frozen=True, slots=True)
class StorageTarget:
    """Where a capture output should be written.

    Exactly one of ``path`` (direct mode) or ``uri`` (scoped mode) is set;
    ``scoped`` says which.
    """

    scoped: bool
    path: Optional[Path] = None
    uri: Optional[str] = None

    @classmethod
    def direct(cls, path: Path) -> "StorageTarget":
        return cls(scoped=False, path=Path(path))

    @classmethod
    def scoped_uri(cls, uri: str) -> "StorageTarget":
        return cls(scoped=True, uri=uri)

    @property
    def locator(self) -> Locator:
        return self.uri if self.scoped else self.path


class CaptureStorage(ABC):
    """Resolves capture output requests and publishes finished artifacts."""

    @abstractmethod
    def resolve_capture_output(
        self,
        category: str,
        sensor_name: str,
        extension: str,
        session_timestamp: datetime,
    ) -> StorageTarget:
        """Return a fresh target for one capture file. May raise OSError."""

    @abstractmethod
    def resolve_uri_to_file(self, uri: str) -> Optional[Path]:
        """Map a scoped URI back to a concrete file, if one exists."""

    @abstractmethod
    def announce_new_file(self, file: Path, flags: AnnounceFlags) -> None:
        """Make a new artifact discoverable outside the application."""


class ContentResolver(ABC):
    """Opens permission-scoped URIs."""

    @abstractmethod
    def open_file_descriptor(self, uri: str, mode: str) -> Optional[int]:
        """Return an OS file descriptor for ``uri`` or None if unavailable."""

    def delete(self, uri: str) -> bool:
        """Remove the document behind ``uri``. False when unsupported."""
        return False


class LocalCaptureStorage(CaptureStorage, ContentResolver):
    """Directory-backed storage that can act in direct or scoped mode."""

    def __init__(
        self,
        root: Path,
        *,
        use_scoped_storage: bool = False,
        file_prefix: str = "",
        authority: str = "sensor_logger.documents",
    ) -> None:
        self.root = Path(root)
        self.use_scoped_storage = use_scoped_storage
        self.file_prefix = file_prefix
        self.authority = authority
        self._lock = threading.Lock()
        self._announced: Deque[Tuple[Path, AnnounceFlags]] = deque(maxlen=_ANNOUNCE_HISTORY)
        self._reserved: Set[Path] = set()

    @property
    def announced(self) -> List[Tuple[Path, AnnounceFlags]]:
        """Most recent announcements, oldest first."""
        with self._lock:
            return list(self._announced)

    # ------------------------------------------------------------------
    # CaptureStorage

    def resolve_capture_output(
        self,
        category: str,
        sensor_name: str,
        extension: str,
        session_timestamp: datetime,
    ) -> StorageTarget:
        directory = self.root / category if category else self.root
        directory.mkdir(parents=True, exist_ok=True)
        name = capture_filename(session_timestamp, sensor_name, extension, prefix=self.file_prefix)

        with self._lock:
            # Names handed out but not yet on disk still count as taken
            self._reserved = {p for p in self._reserved if not p.exists()}
            path = unique_path(directory, name, self._reserved)
            self._reserved.add(path)

        if not self.use_scoped_storage:
            logger.debug("Resolved direct capture output %s", path)
            return StorageTarget.direct(path)

        uri = self._uri_for(path)
        logger.debug("Resolved scoped capture output %s", uri)
        return StorageTarget.scoped_uri(uri)

    def resolve_uri_to_file(self, uri: str) -> Optional[Path]:
        parts = urlsplit(uri)
        if parts.scheme != CONTENT_SCHEME or parts.netloc != self.authority:
            return None
        relative = unquote(parts.path.lstrip("/"))
        if not relative:
            return None
        candidate = (self.root / relative).resolve()
        root = self.root.resolve()
        if candidate != root and root not in candidate.parents:
            logger.warning("Refusing URI outside storage root: %s", uri)
            return None
        return candidate

    def announce_new_file(self, file: Path, flags: AnnounceFlags) -> None:
        with self._lock:
            self._announced.append((Path(file), flags))
        logger.info(
            "New capture file %s (raw_sensor_info=%s, last_scanned=%s)",
            file,
            flags.raw_sensor_info,
            flags.set_last_scanned,
        )

    # ------------------------------------------------------------------
    # ContentResolver

    def open_file_descriptor(self, uri: str, mode: str) -> Optional[int]:
        path = self.resolve_uri_to_file(uri)
        if path is None:
            return None
        flags = os.O_WRONLY | os.O_CREAT
        flags |= os.O_APPEND if "a" in mode else os.O_TRUNC
        return os.open(path, flags, 0o644)

    def delete(self, uri: str) -> bool:
        path = self.resolve_uri_to_file(uri)
        if path is None:
            return False
        with self._lock:
            self._reserved.discard(path)
        path.unlink(missing_ok=True)
        logger.debug("Deleted %s", uri)
        return True

    def _uri_for(self, path: Path) -> str:
        relative = path.resolve().relative_to(self.root.resolve()).as_posix()
        return f"{CONTENT_SCHEME}://{self.authority}/{quote(relative)}"


__all__ = [
    "AnnounceFlags",
    "CaptureStorage",
    "ContentResolver",
    "DIRECT_ANNOUNCE_FLAGS",
    "LocalCaptureStorage",
    "Locator",
    "SCOPED_ANNOUNCE_FLAGS",
    "StorageTarget",
]
