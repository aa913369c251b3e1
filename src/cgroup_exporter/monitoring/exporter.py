"""Prometheus exposition for collection rounds.

ContainerStatsCollector implements the prometheus_client custom collector
protocol: every scrape runs one collection round and yields fresh metric
families built from its snapshot. The collector is registered on an explicit
CollectorRegistry rather than the process-global default one.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from typing import Any

from prometheus_client import CollectorRegistry, start_http_server
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from cgroup_exporter.core.exceptions import EnumerationError
from cgroup_exporter.core.schemas import ExporterConfig
from cgroup_exporter.monitoring.base import MetricSpec
from cgroup_exporter.monitoring.collection import CollectionRound, EntitySource, RoundSnapshot
from cgroup_exporter.monitoring.docker_source import DockerEntitySource
from cgroup_exporter.monitoring.families import build_families

logger = logging.getLogger(__name__)


class ContainerStatsCollector:
    """Runs a collection round per scrape and exposes the result.

    When the containers cannot be listed the scrape still succeeds at the
    HTTP level, but only the scrape status gauges are exposed, with
    ``<namespace>_exporter_scrape_success`` set to 0.
    """

    def __init__(self, engine: CollectionRound, namespace: str) -> None:
        self._engine = engine
        prefix = f"{namespace}_" if namespace else ""
        self._success_name = f"{prefix}exporter_scrape_success"
        self._duration_name = f"{prefix}exporter_scrape_duration_seconds"

    @property
    def engine(self) -> CollectionRound:
        return self._engine

    def describe(self) -> Iterator[Metric]:
        """Describe metrics without running a round (called on registration)."""
        for family in self._engine.families:
            for spec in family.metrics:
                yield self._metric_family(spec, {})
        yield GaugeMetricFamily(self._success_name, "Whether the last scrape listed containers")
        yield GaugeMetricFamily(self._duration_name, "Duration of the last scrape in seconds")

    def collect(self) -> Iterator[Metric]:
        start = time.monotonic()
        snapshot: RoundSnapshot | None
        try:
            snapshot = self._engine.run()
        except EnumerationError as e:
            logger.error(f"Collection round aborted: {e}")
            snapshot = None

        if snapshot is not None:
            for family in self._engine.families:
                for spec in family.metrics:
                    yield self._metric_family(spec, snapshot.values(spec.name))

        yield GaugeMetricFamily(
            self._success_name,
            "Whether the last scrape listed containers",
            value=1.0 if snapshot is not None else 0.0,
        )
        yield GaugeMetricFamily(
            self._duration_name,
            "Duration of the last scrape in seconds",
            value=time.monotonic() - start,
        )

    @staticmethod
    def _metric_family(spec: MetricSpec, values: dict[tuple[str, ...], float]) -> Metric:
        family_cls = CounterMetricFamily if spec.kind == "counter" else GaugeMetricFamily
        metric = family_cls(spec.name, spec.documentation, labels=list(spec.label_names))
        for labels, value in values.items():
            metric.add_metric(list(labels), value)
        return metric


def create_collector(
    config: ExporterConfig, source: EntitySource | None = None
) -> ContainerStatsCollector:
    """Wire families, engine and entity source from a configuration.

    Args:
        config: Exporter configuration
        source: Entity source override. None = Docker daemon from config
    """
    if source is None:
        source = DockerEntitySource(config.docker_url, timeout=config.docker_timeout_seconds)

    engine = CollectionRound(
        source,
        build_families(config),
        max_workers=config.max_workers,
        entity_timeout_seconds=config.entity_timeout_seconds,
    )
    return ContainerStatsCollector(engine, config.namespace)


def build_registry(collector: ContainerStatsCollector) -> CollectorRegistry:
    """Create a registry holding only the given collector."""
    registry = CollectorRegistry()
    registry.register(collector)
    return registry


def serve(config: ExporterConfig, registry: CollectorRegistry) -> Any:
    """Start the /metrics HTTP server in a background thread."""
    logger.info(f"Serving metrics on {config.listen_address}:{config.listen_port}")
    return start_http_server(config.listen_port, addr=config.listen_address, registry=registry)
