"""Shared constants for the cgroup exporter.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# Default pseudo-filesystem roots. Override when the host filesystems are
# mounted elsewhere (e.g. /host/sys inside a container).
DEFAULT_SYS_ROOT = "/sys"
DEFAULT_PROC_ROOT = "/proc"

# cgroup v1 layouts, in priority order: plain docker hierarchy first, then the
# systemd scope naming used when docker runs with the systemd cgroup driver.
MEMORY_STAT_TEMPLATES = (
    "fs/cgroup/memory/docker/{id}/memory.stat",
    "fs/cgroup/memory/system.slice/docker-{id}.scope/memory.stat",
)
CPU_STAT_TEMPLATES = (
    "fs/cgroup/cpuacct/docker/{id}/cpuacct.usage",
    "fs/cgroup/cpuacct/system.slice/docker-{id}.scope/cpuacct.usage",
)
# Relative to the proc root, substituted with the container's init pid.
NETWORK_STAT_TEMPLATES = ("{id}/net/dev",)

NANOSECONDS_PER_SECOND = 1_000_000_000

DEFAULT_NAMESPACE = "cgroup"
PRESENCE_SUBSYSTEM = "docker"
CONTAINER_SUBSYSTEM = "docker_containers"

DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_LISTEN_PORT = 9104

# Device-table topic published by the network family.
NETWORK_BYTES_TOPIC = "bytes"
