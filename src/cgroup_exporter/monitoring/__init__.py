"""Monitoring module - container stats location, parsing and collection.

Provides:
- locator: Accounting file lookup across cgroup layouts
- parsers: memory.stat, cpuacct.usage and net/dev parsers
- families: Selectable metric families (presence, memory, cpu, network)
- collection: The per-scrape collection round
- exporter: prometheus_client collector and HTTP server helpers
"""

from __future__ import annotations

from cgroup_exporter.monitoring.aggregation import (
    convert_field,
    memory_usage_bytes,
    nanoseconds_to_seconds,
)
from cgroup_exporter.monitoring.base import (
    BaseFamily,
    DeviceTable,
    Direction,
    MetricSample,
    MetricSpec,
)
from cgroup_exporter.monitoring.collection import CollectionRound, EntitySource, RoundSnapshot
from cgroup_exporter.monitoring.docker_source import DockerEntitySource
from cgroup_exporter.monitoring.exporter import (
    ContainerStatsCollector,
    build_registry,
    create_collector,
    serve,
)
from cgroup_exporter.monitoring.families import (
    CpuFamily,
    MemoryFamily,
    NetworkFamily,
    PresenceFamily,
    build_families,
)
from cgroup_exporter.monitoring.locator import candidate_paths, locate_stat_file
from cgroup_exporter.monitoring.parsers import (
    format_device_table,
    format_key_value_stats,
    parse_device_table,
    parse_key_value_stats,
    parse_scalar_counter,
    read_stat_file,
)

__all__ = [
    "BaseFamily",
    "build_families",
    "build_registry",
    "candidate_paths",
    "CollectionRound",
    "ContainerStatsCollector",
    "convert_field",
    "CpuFamily",
    "create_collector",
    "DeviceTable",
    "Direction",
    "DockerEntitySource",
    "EntitySource",
    "format_device_table",
    "format_key_value_stats",
    "locate_stat_file",
    "memory_usage_bytes",
    "MemoryFamily",
    "MetricSample",
    "MetricSpec",
    "nanoseconds_to_seconds",
    "NetworkFamily",
    "parse_device_table",
    "parse_key_value_stats",
    "parse_scalar_counter",
    "PresenceFamily",
    "read_stat_file",
    "RoundSnapshot",
    "serve",
]
