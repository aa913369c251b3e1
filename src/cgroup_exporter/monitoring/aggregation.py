"""Derived metric helpers.

Pure functions over parsed accounting data, shared by the parsers and the
metric families.

Functions:
    memory_usage_bytes: rss + cache from a memory.stat mapping
    nanoseconds_to_seconds: Unit conversion for cpuacct counters
    convert_field: Numeric conversion of a raw device-table value
"""

from __future__ import annotations

from collections.abc import Mapping

from cgroup_exporter.core.constants import NANOSECONDS_PER_SECOND
from cgroup_exporter.core.exceptions import FieldConversionError


def memory_usage_bytes(stats: Mapping[str, float]) -> float:
    """Compute container memory usage from memory.stat fields.

    Missing fields count as zero; only malformed files are errors.

    Args:
        stats: Parsed memory.stat mapping

    Returns:
        Resident set plus page cache, in bytes
    """
    return stats.get("rss", 0.0) + stats.get("cache", 0.0)


def nanoseconds_to_seconds(value: float) -> float:
    """Convert a nanosecond counter to seconds.

    Fractional nanoseconds are truncated first, matching how the kernel
    counter is an integer.
    """
    return int(value) / NANOSECONDS_PER_SECOND


def convert_field(
    raw: str, interface: str, topic: str, direction: str, source: str = "<stream>"
) -> float:
    """Convert one raw device-table value to a float.

    Raises:
        FieldConversionError: If the value is not numeric
    """
    try:
        return float(raw)
    except ValueError as e:
        raise FieldConversionError(raw, interface, topic, direction, source) from e
