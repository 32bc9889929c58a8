"""Unit tests for output sinks."""

from unittest.mock import MagicMock

import pytest

from sensor_logger.modules.GPS.gps_core.errors import (
    SinkClosedError,
    SinkOpenError,
    UriResolutionError,
)
from sensor_logger.modules.GPS.gps_core.output import (
    DirectPathSink,
    ScopedUriSink,
    open_output_sink,
)
from sensor_logger.modules.GPS.gps_core.storage import (
    DIRECT_ANNOUNCE_FLAGS,
    SCOPED_ANNOUNCE_FLAGS,
    ContentResolver,
)


class TestDirectPathSink:
    """Test the direct filesystem sink."""

    def test_append_and_close(self, tmp_path):
        """Test lines are written in order and flushed on close."""
        path = tmp_path / "out" / "gps.csv"
        sink = DirectPathSink(path).open()
        sink.append("a,b\n")
        sink.append("1,2\n")
        sink.flush_and_close()

        assert path.read_text(encoding="utf-8") == "a,b\n1,2\n"
        assert sink.closed
        assert sink.lines_written == 2
        assert sink.locator == path
        assert sink.file == path

    def test_flush_and_close_is_idempotent(self, tmp_path):
        """Test repeated close calls leave the file unchanged."""
        path = tmp_path / "gps.csv"
        sink = DirectPathSink(path).open()
        sink.append("x\n")
        sink.flush_and_close()
        sink.flush_and_close()
        sink.flush_and_close()

        assert path.read_text() == "x\n"

    def test_append_after_close_raises(self, tmp_path):
        sink = DirectPathSink(tmp_path / "gps.csv").open()
        sink.flush_and_close()

        with pytest.raises(SinkClosedError):
            sink.append("late\n")

    def test_append_before_open_raises(self, tmp_path):
        with pytest.raises(SinkClosedError):
            DirectPathSink(tmp_path / "gps.csv").append("x\n")

    def test_open_failure_raises_sink_open_error(self, tmp_path):
        """Test an unwritable path is reported as SinkOpenError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(SinkOpenError):
            DirectPathSink(blocker / "gps.csv").open()

    def test_open_announces_with_direct_flags(self, tmp_path):
        storage = MagicMock()
        path = tmp_path / "gps.csv"
        sink = DirectPathSink(path, storage).open()
        sink.flush_and_close()

        storage.announce_new_file.assert_called_once_with(path, DIRECT_ANNOUNCE_FLAGS)

    def test_announce_failure_removes_file(self, tmp_path):
        """Test a sink that cannot be published leaves nothing on disk."""
        storage = MagicMock()
        storage.announce_new_file.side_effect = OSError("media index unavailable")
        path = tmp_path / "gps.csv"
        sink = DirectPathSink(path, storage)

        with pytest.raises(SinkOpenError):
            sink.open()

        assert sink.closed
        assert not path.exists()

    def test_abort_removes_file(self, tmp_path):
        path = tmp_path / "gps.csv"
        sink = DirectPathSink(path).open()
        sink.append("x\n")
        sink.abort()

        assert sink.closed
        assert not path.exists()
        sink.flush_and_close()

    def test_context_manager_closes(self, tmp_path):
        path = tmp_path / "gps.csv"
        with DirectPathSink(path).open() as sink:
            sink.append("x\n")

        assert sink.closed
        assert path.read_text() == "x\n"

    def test_close_error_still_marks_closed(self, tmp_path):
        """Test a failing flush propagates once and the sink stays closed."""
        sink = DirectPathSink(tmp_path / "gps.csv").open()
        sink._stream.close()
        stream = MagicMock()
        stream.flush.side_effect = OSError("disk full")
        sink._stream = stream

        with pytest.raises(OSError):
            sink.flush_and_close()

        stream.close.assert_called_once()
        assert sink.closed
        sink.flush_and_close()


class _NullResolver(ContentResolver):
    def open_file_descriptor(self, uri, mode):
        return None


class _FailingResolver(ContentResolver):
    def open_file_descriptor(self, uri, mode):
        raise FileNotFoundError(uri)


class TestScopedUriSink:
    """Test the scoped-URI sink."""

    def test_writes_through_descriptor(self, scoped_storage, session_timestamp):
        """Test lines land in the file behind the URI."""
        target = scoped_storage.resolve_capture_output("cat", "gps", "csv", session_timestamp)
        sink = ScopedUriSink(target.uri, scoped_storage, scoped_storage).open()
        sink.append("a\n")
        sink.flush_and_close()

        assert sink.locator == target.uri
        assert sink.file == scoped_storage.resolve_uri_to_file(target.uri)
        assert sink.file.read_text() == "a\n"

    def test_announces_with_scoped_flags(self, scoped_storage, session_timestamp):
        target = scoped_storage.resolve_capture_output("cat", "gps", "csv", session_timestamp)
        sink = ScopedUriSink(target.uri, scoped_storage, scoped_storage).open()
        sink.flush_and_close()

        assert scoped_storage.announced == [(sink.file, SCOPED_ANNOUNCE_FLAGS)]

    def test_announce_failure_removes_file(self, scoped_storage, session_timestamp, monkeypatch):
        target = scoped_storage.resolve_capture_output("cat", "gps", "csv", session_timestamp)
        monkeypatch.setattr(
            scoped_storage, "announce_new_file", MagicMock(side_effect=OSError("index down"))
        )

        with pytest.raises(SinkOpenError):
            ScopedUriSink(target.uri, scoped_storage, scoped_storage).open()

        assert not scoped_storage.resolve_uri_to_file(target.uri).exists()

    def test_unmappable_uri_is_deleted_through_resolver(self, scoped_storage, session_timestamp):
        """Test the resolver removes the document when its file is unknown."""
        target = scoped_storage.resolve_capture_output("cat", "gps", "csv", session_timestamp)
        storage = MagicMock()
        storage.resolve_uri_to_file.side_effect = OSError("lookup failed")

        with pytest.raises(SinkOpenError):
            ScopedUriSink(target.uri, scoped_storage, storage).open()

        assert not scoped_storage.resolve_uri_to_file(target.uri).exists()
        storage.announce_new_file.assert_not_called()

    def test_default_resolver_cannot_delete(self):
        assert _NullResolver().delete("content://x/gps.csv") is False

    def test_null_descriptor_raises(self):
        with pytest.raises(UriResolutionError):
            ScopedUriSink("content://x/gps.csv", _NullResolver()).open()

    def test_resolver_error_raises(self):
        with pytest.raises(UriResolutionError) as excinfo:
            ScopedUriSink("content://x/gps.csv", _FailingResolver()).open()

        assert isinstance(excinfo.value, SinkOpenError)
        assert isinstance(excinfo.value, OSError)

    def test_file_unknown_without_storage(self, scoped_storage, session_timestamp):
        target = scoped_storage.resolve_capture_output("cat", "gps", "csv", session_timestamp)
        sink = ScopedUriSink(target.uri, scoped_storage).open()
        sink.flush_and_close()

        assert sink.file is None


class TestOpenOutputSink:
    """Test sink variant selection."""

    def test_direct_target_gives_direct_sink(self, direct_storage, session_timestamp):
        sink = open_output_sink(direct_storage, None, "cat", "gps", "csv", session_timestamp)
        sink.flush_and_close()

        assert isinstance(sink, DirectPathSink)
        assert sink.file.exists()

    def test_scoped_target_gives_scoped_sink(self, scoped_storage, session_timestamp):
        sink = open_output_sink(scoped_storage, scoped_storage, "cat", "gps", "csv", session_timestamp)
        sink.flush_and_close()

        assert isinstance(sink, ScopedUriSink)
        assert sink.file.exists()

    def test_scoped_target_without_resolver(self, scoped_storage, session_timestamp):
        with pytest.raises(UriResolutionError):
            open_output_sink(scoped_storage, None, "cat", "gps", "csv", session_timestamp)

    def test_resolution_failure_is_wrapped(self, session_timestamp):
        storage = MagicMock()
        storage.resolve_capture_output.side_effect = PermissionError("read-only")

        with pytest.raises(SinkOpenError) as excinfo:
            open_output_sink(storage, None, "cat", "gps", "csv", session_timestamp)

        assert isinstance(excinfo.value.__cause__, PermissionError)
