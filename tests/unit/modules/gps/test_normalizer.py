"""Unit tests for reading normalization."""

import numpy as np
import pytest

from sensor_logger.modules.GPS.gps_core.csv_serializer import CsvSerializer
from sensor_logger.modules.GPS.gps_core.normalizer import ReadingNormalizer
from sensor_logger.modules.GPS.gps_core.types import RawLocation


class TestReadingNormalizer:
    """Test raw fix -> Reading conversion."""

    def test_populated_fields_pass_through(self, clock):
        """Test that provider values are kept as-is."""
        raw = RawLocation(
            latitude=48.1173,
            longitude=11.5166,
            altitude=545.4,
            accuracy=3.5,
            speed=12.25,
            bearing=84.5,
            elapsed_realtime_ns=987_654_321,
        )
        reading = ReadingNormalizer(clock).normalize(raw)

        assert reading.latitude == 48.1173
        assert reading.longitude == 11.5166
        assert reading.altitude == 545.4
        assert reading.accuracy == np.float32(3.5)
        assert reading.speed == np.float32(12.25)
        assert reading.bearing == np.float32(84.5)
        assert reading.timestamp_ns == 987_654_321
        assert reading.approximate_timestamp is False

    def test_float32_fields_are_float32(self, clock):
        """Test accuracy/speed/bearing are narrowed to float32."""
        raw = RawLocation(latitude=1.0, longitude=2.0, accuracy=0.1, speed=0.1, bearing=0.1)
        reading = ReadingNormalizer(clock).normalize(raw)

        assert isinstance(reading.accuracy, np.float32)
        assert isinstance(reading.speed, np.float32)
        assert isinstance(reading.bearing, np.float32)
        assert isinstance(reading.altitude, float)

    def test_missing_fields_default_to_zero(self, clock):
        """Test unavailable altitude/accuracy/speed/bearing become 0.0."""
        raw = RawLocation(latitude=10.0, longitude=20.0, elapsed_realtime_ns=5)
        reading = ReadingNormalizer(clock).normalize(raw)

        assert reading.altitude == 0.0
        assert reading.accuracy == np.float32(0.0)
        assert reading.speed == np.float32(0.0)
        assert reading.bearing == np.float32(0.0)

    def test_missing_fields_serialize_as_zeros(self, clock):
        """Test the defaulted fields render as 0.0,0.0,0.0,0.0."""
        raw = RawLocation(latitude=10.0, longitude=20.0, elapsed_realtime_ns=42)
        line = CsvSerializer().serialize(ReadingNormalizer(clock).normalize(raw))

        assert line == "10.0,20.0,0.0,0.0,0.0,0.0,42\n"

    def test_non_finite_values_default_to_zero(self, clock):
        """Test NaN/inf values are treated as unavailable."""
        raw = RawLocation(
            latitude=1.0,
            longitude=2.0,
            altitude=float("nan"),
            accuracy=float("inf"),
            elapsed_realtime_ns=1,
        )
        reading = ReadingNormalizer(clock).normalize(raw)

        assert reading.altitude == 0.0
        assert reading.accuracy == np.float32(0.0)

    def test_wall_clock_fallback_is_approximate(self, clock):
        """Test wall-clock milliseconds are scaled to nanoseconds."""
        raw = RawLocation(latitude=1.0, longitude=2.0, time_ms=1_700_000_000_123)
        reading = ReadingNormalizer(clock).normalize(raw)

        assert reading.timestamp_ns == 1_700_000_000_123 * 1_000_000
        assert reading.approximate_timestamp is True

    def test_boot_clock_preferred_over_wall_clock(self, clock):
        """Test the boot-relative stamp wins when both are present."""
        raw = RawLocation(
            latitude=1.0,
            longitude=2.0,
            elapsed_realtime_ns=777,
            time_ms=1_700_000_000_000,
        )
        reading = ReadingNormalizer(clock).normalize(raw)

        assert reading.timestamp_ns == 777
        assert reading.approximate_timestamp is False

    def test_unstamped_fix_uses_clock_source(self, clock):
        """Test a fix without any timestamp is stamped on arrival."""
        normalizer = ReadingNormalizer(clock)
        first = normalizer.normalize(RawLocation(latitude=1.0, longitude=2.0))
        second = normalizer.normalize(RawLocation(latitude=1.0, longitude=2.0))

        assert first.timestamp_ns == 1000
        assert second.timestamp_ns == 2000
        assert first.approximate_timestamp is False

    @pytest.mark.parametrize("bad", ["n/a", object()])
    def test_garbage_optional_values_never_raise(self, clock, bad):
        """Test unparsable optional values fall back to defaults."""
        raw = RawLocation(latitude=1.0, longitude=2.0, speed=bad, elapsed_realtime_ns=1)
        reading = ReadingNormalizer(clock).normalize(raw)

        assert reading.speed == np.float32(0.0)
