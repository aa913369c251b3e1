"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from cgroup_exporter.core.config import load_config
from cgroup_exporter.core.exceptions import (
    EnumerationError,
    ExporterError,
    FieldConversionError,
    StatNotFoundError,
    StatParseError,
)
from cgroup_exporter.core.schemas import Entity, ExporterConfig, FamilyName

__all__ = [
    "Entity",
    "EnumerationError",
    "ExporterConfig",
    "ExporterError",
    "FamilyName",
    "FieldConversionError",
    "load_config",
    "StatNotFoundError",
    "StatParseError",
]
