"""Container cgroup exporter - Core package."""

from __future__ import annotations

from cgroup_exporter.core.schemas import Entity, ExporterConfig, FamilyName

__version__ = "0.1.0"

__all__ = [
    "Entity",
    "ExporterConfig",
    "FamilyName",
    "__version__",
]
