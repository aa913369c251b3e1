"""Collection round: enumerate containers and gather every family's samples.

One round runs per scrape:

    Resetting -> Enumerating -> PerEntity(locate -> parse -> aggregate)* -> Flushing

Every round fills its own builder and freezes it into a RoundSnapshot, so
containers that disappeared since the previous round never leave stale label
sets behind and two overlapping scrapes cannot clobber each other. Per-entity
and per-family failures are logged and skipped; only enumeration failure ends
the round early.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Sequence
from concurrent.futures import FIRST_COMPLETED, Future, wait
from dataclasses import dataclass, field
from typing import Protocol

from cgroup_exporter.core.exceptions import StatNotFoundError, StatParseError
from cgroup_exporter.core.schemas import Entity
from cgroup_exporter.monitoring.base import BaseFamily, MetricSample

logger = logging.getLogger(__name__)


class EntitySource(Protocol):
    """Anything that can list the running containers."""

    def list_entities(self) -> list[Entity]:
        """Return the running containers.

        Raises:
            EnumerationError: If the runtime cannot be queried
        """
        ...


@dataclass(frozen=True)
class RoundSnapshot:
    """Frozen result of one collection round.

    samples maps metric name -> label values -> value.
    """

    samples: dict[str, dict[tuple[str, ...], float]] = field(default_factory=dict)
    entity_count: int = 0
    skipped_count: int = 0
    duration_seconds: float = 0.0

    def values(self, metric: str) -> dict[tuple[str, ...], float]:
        """Samples of one metric (empty if none were published)."""
        return self.samples.get(metric, {})

    @property
    def sample_count(self) -> int:
        return sum(len(v) for v in self.samples.values())


@dataclass
class _EntityResult:
    samples: list[MetricSample] = field(default_factory=list)
    skipped: int = 0


class CollectionRound:
    """Runs collection rounds over a set of metric families.

    Example:
        ```python
        engine = CollectionRound(DockerEntitySource(), build_families(config))
        snapshot = engine.run()
        for labels, value in snapshot.values("cgroup_docker_containers_memory_usage_bytes").items():
            print(labels, value)
        ```
    """

    def __init__(
        self,
        source: EntitySource,
        families: Sequence[BaseFamily],
        max_workers: int = 1,
        entity_timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the collection engine.

        Args:
            source: Container enumerator
            families: Metric families to collect for every container
            max_workers: Entities processed in parallel (1 = sequential)
            entity_timeout_seconds: Skip an entity whose families take longer than this,
                counted from when its worker starts. A timed-out worker is abandoned
                and its slot reused
        """
        self._source = source
        self._families = list(families)
        self._max_workers = max(1, max_workers)
        self._entity_timeout = entity_timeout_seconds
        self._lock = threading.Lock()
        self._published = RoundSnapshot()

    @property
    def families(self) -> list[BaseFamily]:
        return list(self._families)

    @property
    def published(self) -> RoundSnapshot:
        """Snapshot of the last completed round."""
        with self._lock:
            return self._published

    def run(self) -> RoundSnapshot:
        """Run one complete round and publish its snapshot.

        Returns:
            The new snapshot

        Raises:
            EnumerationError: If the containers cannot be listed
        """
        start = time.monotonic()
        samples: dict[str, dict[tuple[str, ...], float]] = {
            spec.name: {} for family in self._families for spec in family.metrics
        }

        entities = self._source.list_entities()
        logger.debug(f"Collecting stats for {len(entities)} containers")

        skipped = 0
        for result in self._collect_all(entities):
            skipped += result.skipped
            for sample in result.samples:
                samples.setdefault(sample.metric, {})[sample.labels] = sample.value

        snapshot = RoundSnapshot(
            samples=samples,
            entity_count=len(entities),
            skipped_count=skipped,
            duration_seconds=time.monotonic() - start,
        )
        with self._lock:
            self._published = snapshot

        logger.debug(
            f"Round finished: {snapshot.sample_count} samples, {skipped} skipped "
            f"in {snapshot.duration_seconds:.3f}s"
        )
        return snapshot

    def _collect_all(self, entities: list[Entity]) -> list[_EntityResult]:
        if self._max_workers == 1 and self._entity_timeout is None:
            return [self._collect_entity(entity) for entity in entities]

        results: dict[int, _EntityResult] = {}
        pending = deque(enumerate(entities))
        # index -> (entity, future, monotonic start time)
        running: dict[int, tuple[Entity, Future, float]] = {}

        while pending or running:
            while pending and len(running) < self._max_workers:
                index, entity = pending.popleft()
                running[index] = (entity, self._start_worker(entity), time.monotonic())

            timeout = None
            if self._entity_timeout is not None:
                first_deadline = min(started for _, _, started in running.values()) + self._entity_timeout
                timeout = max(0.0, first_deadline - time.monotonic())
            wait([future for _, future, _ in running.values()], timeout=timeout, return_when=FIRST_COMPLETED)

            now = time.monotonic()
            for index, (entity, future, started) in list(running.items()):
                if future.done():
                    results[index] = future.result()
                    del running[index]
                elif self._entity_timeout is not None and now - started >= self._entity_timeout:
                    # The worker thread is abandoned; its slot goes to the next entity.
                    logger.warning(
                        f"Timed out collecting stats for container {entity.name} "
                        f"after {self._entity_timeout}s, skipping"
                    )
                    results[index] = _EntityResult(skipped=len(self._families))
                    del running[index]

        return [results[index] for index in range(len(entities))]

    def _start_worker(self, entity: Entity) -> Future:
        future: Future = Future()

        def work() -> None:
            try:
                future.set_result(self._collect_entity(entity))
            except BaseException as e:
                future.set_exception(e)

        # Daemon threads, so a read stuck on a vanished cgroup never blocks exit.
        threading.Thread(target=work, name=f"cgroup-exporter-{entity.id[:12]}", daemon=True).start()
        return future

    def _collect_entity(self, entity: Entity) -> _EntityResult:
        result = _EntityResult()

        for family in self._families:
            try:
                samples = list(family.collect(entity))
            except StatNotFoundError as e:
                # Routine for containers that are starting or just exited.
                logger.debug(f"No {family.name} stats for container {entity.name}: {e}")
                result.skipped += 1
            except (StatParseError, OSError) as e:
                logger.warning(f"Failed to collect {family.name} stats for container {entity.name}: {e}")
                result.skipped += 1
            else:
                result.samples.extend(samples)

        return result

