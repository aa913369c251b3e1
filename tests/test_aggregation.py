"""Tests for derived metric helpers."""

import io

import pytest

from cgroup_exporter.core.exceptions import FieldConversionError, StatParseError
from cgroup_exporter.monitoring.aggregation import (
    convert_field,
    memory_usage_bytes,
    nanoseconds_to_seconds,
)
from cgroup_exporter.monitoring.parsers import parse_key_value_stats
from tests.samples import MEMORY_STAT_DATA


class TestMemoryUsage:
    """Tests for memory_usage_bytes."""

    def test_sample_file(self):
        """Test rss + cache on a real memory.stat."""
        stats = parse_key_value_stats(io.StringIO(MEMORY_STAT_DATA))
        assert memory_usage_bytes(stats) == 3780608.0

    def test_missing_fields_count_as_zero(self):
        assert memory_usage_bytes({"rss": 100.0}) == 100.0
        assert memory_usage_bytes({"cache": 50.0}) == 50.0
        assert memory_usage_bytes({}) == 0.0

    def test_other_fields_ignored(self):
        assert memory_usage_bytes({"rss": 1.0, "cache": 2.0, "swap": 1000.0}) == 3.0


class TestNanosecondsToSeconds:
    def test_conversion(self):
        assert nanoseconds_to_seconds(61239221) == pytest.approx(0.061239221)
        assert nanoseconds_to_seconds(0) == 0.0

    def test_fraction_truncated(self):
        assert nanoseconds_to_seconds(1_000_000_000.9) == 1.0


class TestConvertField:
    """Tests for device-table field conversion."""

    def test_numeric(self):
        assert convert_field("29473964", "docker0", "bytes", "receive") == 29473964.0

    def test_invalid_value(self):
        """Test that the error carries the offending location."""
        with pytest.raises(FieldConversionError) as exc_info:
            convert_field("n/a", "eth0", "bytes", "transmit", "/proc/1/net/dev")

        error = exc_info.value
        assert isinstance(error, StatParseError)
        assert error.raw == "n/a"
        assert error.interface == "eth0"
        assert error.topic == "bytes"
        assert error.direction == "transmit"
        assert error.source == "/proc/1/net/dev"

    def test_empty_value(self):
        """Test that a short row's missing value is rejected."""
        with pytest.raises(FieldConversionError):
            convert_field("", "eth0", "bytes", "transmit")
