"""Accounting file lookup across cgroup hierarchy layouts."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from cgroup_exporter.core.exceptions import StatNotFoundError

logger = logging.getLogger(__name__)


def candidate_paths(entity_id: str, templates: Sequence[str], root: Path | str) -> list[Path]:
    """Expand path templates for an entity, keeping their priority order.

    Args:
        entity_id: Container ID (or PID for procfs templates)
        templates: Templates with one {id} slot, relative to root
        root: Pseudo-filesystem root the templates hang off

    Returns:
        Candidate paths in the order they should be tried
    """
    if not entity_id:
        raise ValueError("entity id must not be empty")

    root = Path(root)
    return [root / template.format(id=entity_id) for template in templates]


def locate_stat_file(entity_id: str, templates: Sequence[str], root: Path | str) -> Path:
    """Find the accounting file for an entity.

    The first candidate that exists wins; candidates are never merged. Only
    existence is checked here, readability is left to the parser.

    Args:
        entity_id: Container ID (or PID for procfs templates)
        templates: Templates with one {id} slot, in priority order
        root: Pseudo-filesystem root the templates hang off

    Returns:
        Path to the accounting file

    Raises:
        StatNotFoundError: If no candidate exists
    """
    candidates = candidate_paths(entity_id, templates, root)
    for path in candidates:
        logger.debug(f"Checking stats path: {path}")
        if path.exists():
            return path

    raise StatNotFoundError(entity_id, candidates)
