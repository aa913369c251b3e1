"""Base family abstract class and shared sample types.

All metric families implement this interface so a deployment can compose any
subset of {presence, memory, cpu, network} on top of one collection engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from cgroup_exporter.core.schemas import Entity

MetricKind = Literal["gauge", "counter"]


@dataclass
class Direction:
    """Raw receive/transmit strings for one device-table topic."""

    receive: str = ""
    transmit: str = ""


# interface -> topic -> Direction
DeviceTable = dict[str, dict[str, Direction]]


@dataclass(frozen=True)
class MetricSpec:
    """Static description of one published metric."""

    name: str  # Fully qualified, including namespace
    documentation: str
    kind: MetricKind
    label_names: tuple[str, ...]


@dataclass(frozen=True)
class MetricSample:
    """A single labeled value produced for one entity in one round."""

    metric: str  # MetricSpec.name this sample belongs to
    labels: tuple[str, ...]
    value: float


class BaseFamily(ABC):
    """Abstract base class for metric families.

    Implementations:
    - PresenceFamily: one sample per running container
    - MemoryFamily: rss + cache from memory.stat
    - CpuFamily: cpuacct.usage in seconds
    - NetworkFamily: per-interface receive/transmit bytes
    """

    def __init__(self, namespace: str, include_id_label: bool = False) -> None:
        self._namespace = namespace
        self._include_id_label = include_id_label

    @property
    @abstractmethod
    def name(self) -> str:
        """Short family name used in logs and config."""
        pass

    @property
    @abstractmethod
    def metrics(self) -> tuple[MetricSpec, ...]:
        """Metrics this family publishes."""
        pass

    @abstractmethod
    def collect(self, entity: Entity) -> Iterable[MetricSample]:
        """Locate, parse and aggregate this family's stats for one entity.

        Args:
            entity: Container to collect for

        Returns:
            Samples for this entity

        Raises:
            StatNotFoundError: If no accounting file exists for the entity
            StatParseError: If the accounting file is malformed
            OSError: If the file vanished or could not be read
        """
        pass

    def label_names(self, *extra: str) -> tuple[str, ...]:
        base = ("name", "id", "image") if self._include_id_label else ("name", "image")
        return base + extra

    def label_values(self, entity: Entity, *extra: str) -> tuple[str, ...]:
        if self._include_id_label:
            base: tuple[str, ...] = (entity.name, entity.id, entity.image)
        else:
            base = (entity.name, entity.image)
        return base + extra

    def metric_name(self, subsystem: str, name: str) -> str:
        return "_".join(part for part in (self._namespace, subsystem, name) if part)
