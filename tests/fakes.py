"""Test doubles: a fake host filesystem and a fixed entity source."""

from __future__ import annotations

from pathlib import Path

from cgroup_exporter.core.schemas import Entity, ExporterConfig
from tests.samples import CPU_USAGE_DATA, MEMORY_STAT_DATA, NET_DEV_DATA


class FakeHost:
    """Builds cgroup v1 and procfs files under a temporary root."""

    def __init__(self, root: Path) -> None:
        self.sys_root = root / "sys"
        self.proc_root = root / "proc"
        self.sys_root.mkdir()
        self.proc_root.mkdir()

    def add_memory(self, container_id: str, content: str = MEMORY_STAT_DATA, systemd: bool = False) -> Path:
        if systemd:
            cgroup = self.sys_root / f"fs/cgroup/memory/system.slice/docker-{container_id}.scope"
        else:
            cgroup = self.sys_root / f"fs/cgroup/memory/docker/{container_id}"
        return self._write(cgroup / "memory.stat", content)

    def add_cpu(self, container_id: str, content: str = CPU_USAGE_DATA, systemd: bool = False) -> Path:
        if systemd:
            cgroup = self.sys_root / f"fs/cgroup/cpuacct/system.slice/docker-{container_id}.scope"
        else:
            cgroup = self.sys_root / f"fs/cgroup/cpuacct/docker/{container_id}"
        return self._write(cgroup / "cpuacct.usage", content)

    def add_network(self, pid: int, content: str = NET_DEV_DATA) -> Path:
        return self._write(self.proc_root / str(pid) / "net" / "dev", content)

    def add_container(self, entity: Entity) -> None:
        self.add_memory(entity.id)
        self.add_cpu(entity.id)
        self.add_network(entity.pid)

    def config(self, **kwargs) -> ExporterConfig:
        return ExporterConfig(sys_root=self.sys_root, proc_root=self.proc_root, **kwargs)

    @staticmethod
    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path


class FakeSource:
    """Entity source returning a fixed (mutable) list."""

    def __init__(self, entities: list[Entity] | None = None, error: Exception | None = None) -> None:
        self.entities = list(entities or [])
        self.error = error
        self.calls = 0

    def list_entities(self) -> list[Entity]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.entities)
