"""DockerEntitySource - lists running containers through the Docker API.

Only container metadata (id, name, image, init pid) comes from the Docker API;
resource usage is read from cgroup and proc files, which is much faster than
the Docker stats endpoint for many containers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import docker
import requests
from docker.errors import DockerException
from pydantic import ValidationError

from cgroup_exporter.core.exceptions import EnumerationError
from cgroup_exporter.core.schemas import Entity

if TYPE_CHECKING:
    import docker.models.containers

logger = logging.getLogger(__name__)


class DockerEntitySource:
    """Entity source backed by the Docker daemon.

    Example:
        ```python
        source = DockerEntitySource()
        for entity in source.list_entities():
            print(entity.name, entity.pid)
        ```
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int = 10,
        client: docker.DockerClient | None = None,
    ) -> None:
        """Initialize the Docker entity source.

        Args:
            base_url: Docker daemon URL (e.g. unix:///var/run/docker.sock). None = environment
            timeout: API timeout in seconds
            client: Pre-built client, mainly for tests
        """
        self._base_url = base_url
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            if self._base_url:
                self._client = docker.DockerClient(base_url=self._base_url, timeout=self._timeout)
            else:
                self._client = docker.from_env(timeout=self._timeout)
        return self._client

    def is_available(self) -> bool:
        """Check if the Docker daemon answers."""
        try:
            self.client.ping()
            return True
        except (DockerException, requests.RequestException):
            return False

    def list_entities(self) -> list[Entity]:
        """List running containers.

        Returns:
            One Entity per running container

        Raises:
            EnumerationError: If the daemon cannot be reached or answers with an error
        """
        try:
            containers = self.client.containers.list(all=False, ignore_removed=True)
        except (DockerException, requests.RequestException) as e:
            raise EnumerationError(f"failed to list containers: {e}") from e

        entities: list[Entity] = []
        for container in containers:
            try:
                entity = self._to_entity(container)
            except ValidationError as e:
                logger.debug(f"Skipping container {container.id}: {e}")
                continue
            logger.debug(f"Adding container {entity.name} with id {entity.id}")
            entities.append(entity)

        return entities

    @staticmethod
    def _to_entity(container: docker.models.containers.Container) -> Entity:
        attrs: dict[str, Any] = container.attrs or {}

        # Inspect data carries "Name"; list data carries "Names". Both keep the leading '/'.
        name = attrs.get("Name") or next(iter(attrs.get("Names") or []), "")

        config = attrs.get("Config") or {}
        image = config.get("Image") or attrs.get("Image") or ""

        # "State" is a dict in inspect data but a plain string in list data.
        state = attrs.get("State")
        pid = state.get("Pid", 0) if isinstance(state, dict) else 0

        return Entity(id=container.id, name=name, image=image, pid=pid or 0)
