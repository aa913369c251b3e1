"""Exception hierarchy for the cgroup exporter.

Only EnumerationError escapes a collection round. Everything else is raised
per entity and per metric family, caught at the round boundary, logged, and
turned into a skipped sample.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class ExporterError(Exception):
    """Base class for all exporter errors."""


class EnumerationError(ExporterError):
    """The container runtime could not list the running containers."""


class StatNotFoundError(ExporterError, FileNotFoundError):
    """No candidate accounting file exists for an entity."""

    def __init__(self, entity_id: str, candidates: Sequence[Path] = ()) -> None:
        self.entity_id = entity_id
        self.candidates = tuple(candidates)
        tried = ", ".join(str(c) for c in self.candidates) or "no candidates"
        super().__init__(f"failed to find stats file for container {entity_id} (tried: {tried})")


class StatParseError(ExporterError, ValueError):
    """An accounting file could not be parsed.

    Attributes:
        source: File path (or stream label) that failed
        partial_value: Value accumulated before the failure, if any. Never publish it.
    """

    def __init__(self, message: str, source: str = "<stream>", partial_value: float | None = None) -> None:
        self.source = source
        self.partial_value = partial_value
        super().__init__(f"{source}: {message}")


class FieldConversionError(StatParseError):
    """A single device-table field is not numeric."""

    def __init__(self, raw: str, interface: str, topic: str, direction: str, source: str = "<stream>") -> None:
        self.raw = raw
        self.interface = interface
        self.topic = topic
        self.direction = direction
        super().__init__(
            f"invalid {direction} value {raw!r} for topic {topic!r} on interface {interface!r}",
            source=source,
        )
