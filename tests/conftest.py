"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from cgroup_exporter.core.schemas import Entity
from tests.fakes import FakeHost


@pytest.fixture
def fake_host(tmp_path: Path) -> FakeHost:
    return FakeHost(tmp_path)


@pytest.fixture
def entities() -> list[Entity]:
    return [
        Entity(id="a" * 64, name="/web", image="nginx:latest", pid=101),
        Entity(id="b" * 64, name="/db", image="postgres:16", pid=202),
        Entity(id="c" * 64, name="/cache", image="redis:7", pid=303),
    ]
