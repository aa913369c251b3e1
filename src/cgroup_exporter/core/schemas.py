"""Pydantic schemas for the cgroup exporter.

This module defines the data contracts shared across the exporter: the
container entity handed over by the runtime and the exporter configuration.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from cgroup_exporter.core.constants import (
    CPU_STAT_TEMPLATES,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_LISTEN_PORT,
    DEFAULT_NAMESPACE,
    DEFAULT_PROC_ROOT,
    DEFAULT_SYS_ROOT,
    MEMORY_STAT_TEMPLATES,
    NETWORK_STAT_TEMPLATES,
)


class FamilyName(str, Enum):
    """Selectable metric families."""

    PRESENCE = "presence"  # One sample per running container
    MEMORY = "memory"  # memory.stat rss + cache
    CPU = "cpu"  # cpuacct.usage in seconds
    NETWORK = "network"  # /proc/<pid>/net/dev bytes per interface


class Entity(BaseModel):
    """A running container as reported by the runtime.

    Attributes:
        id: Full container ID
        name: Container name without the runtime's leading separator
        image: Image reference the container was started from
        pid: Host PID of the container's init process (0 if unknown)
    """

    id: str = Field(..., min_length=1)
    name: str
    image: str = ""
    pid: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @field_validator("name")
    @classmethod
    def strip_name_separator(cls, v: str) -> str:
        """Drop the single leading '/' the runtime puts in front of names."""
        if v.startswith("/"):
            return v[1:]
        return v


class ExporterConfig(BaseModel):
    """Top-level exporter configuration.

    Loaded from YAML/JSON files; CLI options override individual fields.
    """

    sys_root: Path = Field(default=Path(DEFAULT_SYS_ROOT), description="sysfs mount point")
    proc_root: Path = Field(default=Path(DEFAULT_PROC_ROOT), description="procfs mount point")
    docker_url: str | None = Field(
        default=None, description="Docker daemon URL. None = use DOCKER_HOST / defaults"
    )
    docker_timeout_seconds: int = Field(default=10, ge=1)

    namespace: str = Field(default=DEFAULT_NAMESPACE, description="Metric name prefix")
    families: list[FamilyName] = Field(default_factory=lambda: list(FamilyName))
    include_id_label: bool = Field(
        default=False, description="Add the container id as a label next to name and image"
    )

    memory_stat_templates: list[str] = Field(default_factory=lambda: list(MEMORY_STAT_TEMPLATES))
    cpu_stat_templates: list[str] = Field(default_factory=lambda: list(CPU_STAT_TEMPLATES))
    network_stat_templates: list[str] = Field(default_factory=lambda: list(NETWORK_STAT_TEMPLATES))

    listen_address: str = Field(default=DEFAULT_LISTEN_ADDRESS)
    listen_port: int = Field(default=DEFAULT_LISTEN_PORT, ge=1, le=65535)

    max_workers: int = Field(default=1, ge=1, le=64, description="Per-entity worker threads")
    entity_timeout_seconds: float | None = Field(
        default=None, gt=0, description="Skip an entity whose stats take longer than this"
    )

    log_level: str = Field(default="INFO")

    model_config = {"extra": "forbid"}

    @field_validator("memory_stat_templates", "cpu_stat_templates", "network_stat_templates")
    @classmethod
    def validate_templates(cls, v: list[str]) -> list[str]:
        """Every template needs exactly one {id} slot."""
        if not v:
            raise ValueError("at least one path template is required")
        for template in v:
            if template.count("{id}") != 1:
                raise ValueError(f"template must contain exactly one {{id}} slot: {template}")
        return v

    @field_validator("families")
    @classmethod
    def dedupe_families(cls, v: list[FamilyName]) -> list[FamilyName]:
        """Keep the first occurrence of each family, preserving order."""
        return list(dict.fromkeys(v))

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level
