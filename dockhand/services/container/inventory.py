"""Container discovery queries.

Every query re-lists the engine's containers; nothing is cached, so results
always reflect the engine's live state at call time.
"""

from typing import List, Optional

import structlog

from ...models.container import ContainerRecord
from ...models.errors import NotFoundError
from .client import EngineHandle

logger = structlog.get_logger(__name__)


class ContainerInventory:
    """Lists and filters containers on the engine."""

    def __init__(self, engine: EngineHandle):
        self.engine = engine

    def list_containers(self, all: bool = True) -> List[ContainerRecord]:
        """List containers, including stopped ones unless all=False."""
        with self.engine.engine_call("list containers") as client:
            containers = client.containers.list(all=all, sparse=True)
        return [ContainerRecord.from_api(container.attrs) for container in containers]

    def find_by_name(self, name: str) -> Optional[str]:
        """Return the identifier of the container with this exact name, or None."""
        for record in self.list_containers(all=True):
            if record.has_name(name):
                logger.debug("Found container by name", name=name, container_id=record.id)
                return record.id
        return None

    def find_by_label(self, key: str, value: str) -> List[ContainerRecord]:
        """Return containers whose label `key` is exactly `value`, in listing order."""
        return [record for record in self.list_containers(all=True) if record.has_label(key, value)]

    def get_state(self, container_id: str) -> str:
        """Return the lifecycle state of a container.

        Raises:
            NotFoundError: No container has this identifier
        """
        for record in self.list_containers(all=True):
            if record.id == container_id:
                return record.state
        raise NotFoundError(container_id)
