"""Tests for the command-line interface."""

from unittest.mock import patch

import yaml
from typer.testing import CliRunner

from cgroup_exporter.cli import app
from cgroup_exporter.core.config import load_config
from cgroup_exporter.core.exceptions import EnumerationError
from tests.fakes import FakeSource
from tests.samples import CPU_USAGE_DATA, MEMORY_STAT_DATA, NET_DEV_DATA

runner = CliRunner()


class TestInspect:
    """Tests for the inspect command."""

    def test_memory(self, tmp_path):
        path = tmp_path / "memory.stat"
        path.write_text(MEMORY_STAT_DATA)

        result = runner.invoke(app, ["inspect", str(path), "--kind", "memory"])

        assert result.exit_code == 0
        assert "3,780,608" in result.output

    def test_memory_raw(self, tmp_path):
        """Test --raw re-renders the file in its own format."""
        path = tmp_path / "memory.stat"
        path.write_text(MEMORY_STAT_DATA)

        result = runner.invoke(app, ["inspect", str(path), "--kind", "memory", "--raw"])

        assert result.exit_code == 0
        assert "cache 3293184\n" in result.output
        assert "rss 487424\n" in result.output

    def test_cpu(self, tmp_path):
        path = tmp_path / "cpuacct.usage"
        path.write_text(CPU_USAGE_DATA)

        result = runner.invoke(app, ["inspect", str(path), "-k", "cpu"])

        assert result.exit_code == 0
        assert "0.061239221" in result.output

    def test_network_raw(self, tmp_path):
        path = tmp_path / "dev"
        path.write_text(NET_DEV_DATA)

        result = runner.invoke(app, ["inspect", str(path), "-k", "network", "--raw"])

        assert result.exit_code == 0
        assert "docker0: 29473964 297207" in result.output

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "memory.stat"
        path.write_text("rss lots\n")

        result = runner.invoke(app, ["inspect", str(path), "-k", "memory"])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["inspect", str(tmp_path / "gone"), "-k", "cpu"])
        assert result.exit_code == 1


class TestCollect:
    """Tests for the collect command."""

    def test_table(self, entities):
        source = FakeSource(entities[:1])

        with patch("cgroup_exporter.monitoring.exporter.DockerEntitySource", return_value=source):
            result = runner.invoke(
                app, ["collect", "--format", "table"], env={"COLUMNS": "200"}
            )

        assert result.exit_code == 0
        assert "1 containers" in result.output
        assert source.calls == 1

    def test_prometheus(self, fake_host, entities, tmp_path):
        fake_host.add_container(entities[0])
        config_path = tmp_path / "exporter.yaml"
        config_path.write_text(
            yaml.safe_dump({"sys_root": str(fake_host.sys_root), "proc_root": str(fake_host.proc_root)})
        )

        with patch(
            "cgroup_exporter.monitoring.exporter.DockerEntitySource",
            return_value=FakeSource(entities[:1]),
        ):
            result = runner.invoke(app, ["collect", "-c", str(config_path), "-f", "prometheus"])

        assert result.exit_code == 0
        assert 'cgroup_docker_containers_memory_usage_bytes{image="nginx:latest",name="web"}' in result.output
        assert "cgroup_exporter_scrape_success 1.0" in result.output

    def test_enumeration_failure(self):
        with patch(
            "cgroup_exporter.monitoring.exporter.DockerEntitySource",
            return_value=FakeSource(error=EnumerationError("daemon unreachable")),
        ):
            result = runner.invoke(app, ["collect"])

        assert result.exit_code == 1
        assert "daemon unreachable" in result.output

    def test_bad_config(self, tmp_path):
        path = tmp_path / "exporter.yaml"
        path.write_text("listen_port: 0\n")

        result = runner.invoke(app, ["collect", "-c", str(path)])

        assert result.exit_code == 1


class TestInitConfig:
    def test_sample_config_is_valid(self, tmp_path):
        """Test the generated file loads with the documented defaults."""
        output = tmp_path / "conf" / "exporter.yaml"

        result = runner.invoke(app, ["init-config", "--output", str(output)])

        assert result.exit_code == 0
        config = load_config(output)
        assert config.namespace == "cgroup"
        assert config.listen_port == 9104
        assert len(config.memory_stat_templates) == 2


class TestServe:
    def test_serve_wires_registry(self, tmp_path):
        """Test serve starts the HTTP server with CLI overrides applied."""
        with (
            patch("cgroup_exporter.cli.serve_http") as mock_serve,
            patch("cgroup_exporter.cli.threading.Event") as mock_event,
            patch("cgroup_exporter.cli.setup_logging"),
        ):
            mock_event.return_value.wait.side_effect = KeyboardInterrupt
            result = runner.invoke(app, ["serve", "--port", "9300", "--sys-root", str(tmp_path)])

        assert result.exit_code == 0
        config = mock_serve.call_args.args[0]
        assert config.listen_port == 9300
        assert config.sys_root == tmp_path
