"""Metric families: one publisher per resource.

Each family turns a container into samples by running
locate -> parse -> aggregate on its own accounting file. Families are
independent, so a failing memory lookup never affects CPU or network samples
for the same container.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path

from cgroup_exporter.core.constants import (
    CONTAINER_SUBSYSTEM,
    CPU_STAT_TEMPLATES,
    MEMORY_STAT_TEMPLATES,
    NETWORK_BYTES_TOPIC,
    NETWORK_STAT_TEMPLATES,
    PRESENCE_SUBSYSTEM,
)
from cgroup_exporter.core.exceptions import FieldConversionError, StatNotFoundError
from cgroup_exporter.core.schemas import Entity, ExporterConfig, FamilyName
from cgroup_exporter.monitoring.aggregation import convert_field, memory_usage_bytes
from cgroup_exporter.monitoring.base import BaseFamily, MetricSample, MetricSpec
from cgroup_exporter.monitoring.locator import locate_stat_file
from cgroup_exporter.monitoring.parsers import (
    parse_device_table,
    parse_key_value_stats,
    parse_scalar_counter,
    read_stat_file,
)

logger = logging.getLogger(__name__)


class PresenceFamily(BaseFamily):
    """Publishes 1 for every running container."""

    def __init__(self, namespace: str, include_id_label: bool = False) -> None:
        super().__init__(namespace, include_id_label)
        self._spec = MetricSpec(
            name=self.metric_name(PRESENCE_SUBSYSTEM, "containers"),
            documentation="Running Docker containers",
            kind="gauge",
            label_names=self.label_names(),
        )

    @property
    def name(self) -> str:
        return FamilyName.PRESENCE.value

    @property
    def metrics(self) -> tuple[MetricSpec, ...]:
        return (self._spec,)

    def collect(self, entity: Entity) -> Iterator[MetricSample]:
        yield MetricSample(self._spec.name, self.label_values(entity), 1.0)


class MemoryFamily(BaseFamily):
    """Container memory usage (rss + cache) from memory.stat."""

    def __init__(
        self,
        namespace: str,
        sys_root: Path | str,
        templates: Sequence[str] = MEMORY_STAT_TEMPLATES,
        include_id_label: bool = False,
    ) -> None:
        super().__init__(namespace, include_id_label)
        self._sys_root = Path(sys_root)
        self._templates = tuple(templates)
        self._spec = MetricSpec(
            name=self.metric_name(CONTAINER_SUBSYSTEM, "memory_usage_bytes"),
            documentation="Container memory usage in bytes",
            kind="gauge",
            label_names=self.label_names(),
        )

    @property
    def name(self) -> str:
        return FamilyName.MEMORY.value

    @property
    def metrics(self) -> tuple[MetricSpec, ...]:
        return (self._spec,)

    def collect(self, entity: Entity) -> Iterator[MetricSample]:
        path = locate_stat_file(entity.id, self._templates, self._sys_root)
        stats = read_stat_file(path, parse_key_value_stats)
        yield MetricSample(self._spec.name, self.label_values(entity), memory_usage_bytes(stats))


class CpuFamily(BaseFamily):
    """Cumulative container CPU time in seconds from cpuacct.usage."""

    def __init__(
        self,
        namespace: str,
        sys_root: Path | str,
        templates: Sequence[str] = CPU_STAT_TEMPLATES,
        include_id_label: bool = False,
    ) -> None:
        super().__init__(namespace, include_id_label)
        self._sys_root = Path(sys_root)
        self._templates = tuple(templates)
        self._spec = MetricSpec(
            name=self.metric_name(CONTAINER_SUBSYSTEM, "cpu_usage_seconds_total"),
            documentation="Container combined CPU time in seconds",
            kind="counter",
            label_names=self.label_names(),
        )

    @property
    def name(self) -> str:
        return FamilyName.CPU.value

    @property
    def metrics(self) -> tuple[MetricSpec, ...]:
        return (self._spec,)

    def collect(self, entity: Entity) -> Iterator[MetricSample]:
        path = locate_stat_file(entity.id, self._templates, self._sys_root)
        seconds = read_stat_file(path, parse_scalar_counter)
        yield MetricSample(self._spec.name, self.label_values(entity), seconds)


class NetworkFamily(BaseFamily):
    """Per-interface receive/transmit bytes from /proc/<pid>/net/dev.

    A field that is not numeric is logged and skipped on its own; the other
    direction and the other interfaces are still published.
    """

    def __init__(
        self,
        namespace: str,
        proc_root: Path | str,
        templates: Sequence[str] = NETWORK_STAT_TEMPLATES,
        include_id_label: bool = False,
    ) -> None:
        super().__init__(namespace, include_id_label)
        self._proc_root = Path(proc_root)
        self._templates = tuple(templates)
        labels = self.label_names("interface")
        self._receive = MetricSpec(
            name=self.metric_name(CONTAINER_SUBSYSTEM, "network_receive_bytes"),
            documentation="Container network receive in bytes",
            kind="gauge",
            label_names=labels,
        )
        self._transmit = MetricSpec(
            name=self.metric_name(CONTAINER_SUBSYSTEM, "network_transmit_bytes"),
            documentation="Container network transmit in bytes",
            kind="gauge",
            label_names=labels,
        )

    @property
    def name(self) -> str:
        return FamilyName.NETWORK.value

    @property
    def metrics(self) -> tuple[MetricSpec, ...]:
        return (self._receive, self._transmit)

    def collect(self, entity: Entity) -> Iterator[MetricSample]:
        if entity.pid <= 0:
            # No init process to read net/dev through (container exiting, or
            # the runtime did not report a pid).
            raise StatNotFoundError(entity.id)

        path = locate_stat_file(str(entity.pid), self._templates, self._proc_root)
        table = read_stat_file(path, parse_device_table)

        for interface, row in table.items():
            direction = row.get(NETWORK_BYTES_TOPIC)
            if direction is None:
                logger.debug(f"No {NETWORK_BYTES_TOPIC} column for {interface} in {path}")
                continue

            labels = self.label_values(entity, interface)
            for spec, raw, kind in (
                (self._receive, direction.receive, "receive"),
                (self._transmit, direction.transmit, "transmit"),
            ):
                try:
                    value = convert_field(raw, interface, NETWORK_BYTES_TOPIC, kind, str(path))
                except FieldConversionError as e:
                    logger.warning(f"Skipping {kind} bytes for {entity.name}: {e}")
                    continue
                yield MetricSample(spec.name, labels, value)


def build_families(config: ExporterConfig) -> list[BaseFamily]:
    """Instantiate the families selected in the configuration, in order."""
    factories = {
        FamilyName.PRESENCE: lambda: PresenceFamily(config.namespace, config.include_id_label),
        FamilyName.MEMORY: lambda: MemoryFamily(
            config.namespace, config.sys_root, config.memory_stat_templates, config.include_id_label
        ),
        FamilyName.CPU: lambda: CpuFamily(
            config.namespace, config.sys_root, config.cpu_stat_templates, config.include_id_label
        ),
        FamilyName.NETWORK: lambda: NetworkFamily(
            config.namespace, config.proc_root, config.network_stat_templates, config.include_id_label
        ),
    }
    return [factories[name]() for name in config.families]
