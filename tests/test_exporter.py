"""Tests for Prometheus exposition."""

from unittest.mock import patch

import pytest
from prometheus_client import generate_latest

from cgroup_exporter.core.exceptions import EnumerationError
from cgroup_exporter.monitoring.exporter import build_registry, create_collector, serve
from tests.fakes import FakeSource

WEB = {"name": "web", "image": "nginx:latest"}


class TestContainerStatsCollector:
    """Tests for the custom collector behind /metrics."""

    def test_scrape(self, fake_host, entities):
        """Test a scrape exposes every family with name and image labels."""
        for entity in entities:
            fake_host.add_container(entity)
        registry = build_registry(create_collector(fake_host.config(), FakeSource(entities)))

        assert registry.get_sample_value("cgroup_docker_containers", WEB) == 1.0
        assert registry.get_sample_value("cgroup_docker_containers_memory_usage_bytes", WEB) == 3780608.0
        assert registry.get_sample_value(
            "cgroup_docker_containers_cpu_usage_seconds_total", WEB
        ) == pytest.approx(0.061239221)
        assert (
            registry.get_sample_value(
                "cgroup_docker_containers_network_receive_bytes", {**WEB, "interface": "docker0"}
            )
            == 29473964.0
        )
        assert (
            registry.get_sample_value(
                "cgroup_docker_containers_network_transmit_bytes", {**WEB, "interface": "docker0"}
            )
            == 977390200.0
        )
        assert registry.get_sample_value("cgroup_exporter_scrape_success") == 1.0
        assert registry.get_sample_value("cgroup_exporter_scrape_duration_seconds") >= 0.0

    def test_each_scrape_runs_a_round(self, fake_host, entities):
        source = FakeSource(entities)
        registry = build_registry(create_collector(fake_host.config(), source))

        generate_latest(registry)
        generate_latest(registry)

        assert source.calls == 2

    def test_stopped_container_disappears(self, fake_host, entities):
        for entity in entities:
            fake_host.add_container(entity)
        source = FakeSource(entities)
        registry = build_registry(create_collector(fake_host.config(), source))

        generate_latest(registry)
        source.entities = entities[1:]

        assert registry.get_sample_value("cgroup_docker_containers_memory_usage_bytes", WEB) is None

    def test_enumeration_failure(self, fake_host):
        """Test a daemon outage reports scrape_success 0 instead of failing."""
        source = FakeSource(error=EnumerationError("connection refused"))
        registry = build_registry(create_collector(fake_host.config(), source))

        output = generate_latest(registry).decode()

        assert registry.get_sample_value("cgroup_exporter_scrape_success") == 0.0
        assert "cgroup_docker_containers_memory_usage_bytes" not in output

    def test_id_label(self, fake_host, entities):
        fake_host.add_container(entities[0])
        config = fake_host.config(include_id_label=True, families=["memory"])
        registry = build_registry(create_collector(config, FakeSource(entities[:1])))

        labels = {"name": "web", "id": entities[0].id, "image": "nginx:latest"}
        assert registry.get_sample_value("cgroup_docker_containers_memory_usage_bytes", labels) == 3780608.0

    def test_namespace(self, fake_host, entities):
        config = fake_host.config(namespace="host", families=["presence"])
        registry = build_registry(create_collector(config, FakeSource(entities)))

        assert registry.get_sample_value("host_docker_containers", WEB) == 1.0
        assert registry.get_sample_value("host_exporter_scrape_success") == 1.0

    def test_exposition_format(self, fake_host, entities):
        """Test HELP/TYPE lines and the counter suffix in text output."""
        fake_host.add_container(entities[0])
        registry = build_registry(create_collector(fake_host.config(), FakeSource(entities[:1])))

        output = generate_latest(registry).decode()

        assert "# TYPE cgroup_docker_containers_memory_usage_bytes gauge" in output
        assert "# TYPE cgroup_docker_containers_cpu_usage_seconds counter" in output
        assert 'cgroup_docker_containers_cpu_usage_seconds_total{image="nginx:latest",name="web"}' in output


class TestServe:
    def test_starts_http_server(self, fake_host):
        config = fake_host.config(listen_address="127.0.0.1", listen_port=9999)
        registry = build_registry(create_collector(config, FakeSource()))

        with patch("cgroup_exporter.monitoring.exporter.start_http_server") as mock_start:
            serve(config, registry)

        mock_start.assert_called_once_with(9999, addr="127.0.0.1", registry=registry)
