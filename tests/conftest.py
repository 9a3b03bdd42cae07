"""Pytest configuration and shared fixtures."""

import io
import itertools
import os
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from docker import DockerClient
from docker.api import APIClient
from docker.errors import APIError, NotFound

# Keep test runs independent of the developer's environment
os.environ.pop("DOCKER_BASE_URL", None)
os.environ["DOCKER_PULL_PROGRESS"] = "false"

from dockhand.services.container import ContainerInventory, ContainerManager, EngineHandle


def container_entry(
    container_id: str,
    name: Optional[str] = None,
    state: str = "running",
    labels: Optional[Dict[str, str]] = None,
    image: str = "busybox:latest",
) -> Dict[str, Any]:
    """Build a container listing entry as the engine returns it."""
    return {
        "Id": container_id,
        "Names": [f"/{name}"] if name else [],
        "State": state,
        "Status": "Up 2 seconds" if state == "running" else "Exited (0)",
        "Labels": dict(labels or {}),
        "Image": image,
    }


def sparse_containers(entries: List[Dict[str, Any]]) -> List[MagicMock]:
    """Wrap listing entries the way containers.list(sparse=True) does."""
    return [MagicMock(attrs=entry) for entry in entries]


def image_entry(*tags: str, digests: Optional[List[str]] = None) -> Dict[str, Any]:
    """Build an image listing entry as api.images() returns it."""
    return {
        "Id": "sha256:" + "0" * 64,
        "RepoTags": list(tags) or None,
        "RepoDigests": list(digests or []),
    }


@pytest.fixture
def listing():
    """Build a sparse container listing from (id, name, state, labels) tuples."""

    def _listing(*containers):
        return sparse_containers([container_entry(*container) for container in containers])

    return _listing


@pytest.fixture
def mock_docker():
    """Mock Docker client for testing."""
    mock_client = MagicMock(spec=DockerClient)
    mock_client.api = MagicMock(spec=APIClient)
    mock_container = MagicMock()
    mock_container.id = "test_container_id"

    mock_client.containers.create.return_value = mock_container
    mock_client.containers.list.return_value = []
    mock_client.api.images.return_value = [image_entry("busybox:latest")]
    mock_client.api.pull.return_value = iter([])
    mock_client.api.start.return_value = None
    mock_client.api.remove_container.return_value = None

    return mock_client


@pytest.fixture
def engine(mock_docker):
    """Engine handle wrapping the mocked Docker client."""
    return EngineHandle.from_client(mock_docker)


@pytest.fixture
def inventory(engine):
    return ContainerInventory(engine)


@pytest.fixture
def pull_sink():
    return io.StringIO()


@pytest.fixture
def manager(engine, pull_sink):
    return ContainerManager(engine, pull_output=pull_sink)


class FakeDockerEngine:
    """In-memory stand-in for the daemon, wired into a mocked DockerClient.

    Models exactly the calls dockhand makes: listing containers and images,
    pulling, creating, starting, and removing.
    """

    def __init__(self, images: Optional[List[str]] = None):
        self.images = list(images or [])
        self.containers: Dict[str, Dict[str, Any]] = {}
        self.pulled: List[str] = []
        self._ids = itertools.count(1)

        self.client = MagicMock(spec=DockerClient)
        self.client.api = MagicMock(spec=APIClient)
        self.client.containers.list.side_effect = self._list_containers
        self.client.containers.create.side_effect = self._create
        self.client.api.images.side_effect = self._list_images
        self.client.api.pull.side_effect = self._pull
        self.client.api.start.side_effect = self._start
        self.client.api.remove_container.side_effect = self._remove

    def _list_containers(self, all=False, sparse=False, **kwargs):
        entries = [dict(entry) for entry in self.containers.values()]
        if not all:
            entries = [entry for entry in entries if entry["State"] == "running"]
        return sparse_containers(entries)

    def _list_images(self, name=None, quiet=False, all=False, filters=None):
        return [image_entry(tag) for tag in self.images]

    def _pull(self, repository, tag=None, stream=False, decode=False, **kwargs):
        reference = f"{repository}:{tag}" if tag else repository
        self.pulled.append(reference)
        self.images.append(reference)
        return iter([{"status": f"Pulling from {repository}", "id": tag}, {"status": "Download complete"}])

    def _create(self, image, name=None, labels=None, **kwargs):
        if name and any(f"/{name}" in entry["Names"] for entry in self.containers.values()):
            raise APIError(
                "Conflict",
                response=MagicMock(status_code=409),
                explanation=f'Conflict. The container name "/{name}" is already in use',
            )
        container_id = f"{next(self._ids):064x}"
        generated = name or f"generated_{container_id[-6:]}"
        self.containers[container_id] = container_entry(
            container_id, name=generated, state="created", labels=labels, image=image
        )
        self.containers[container_id]["CreateKwargs"] = dict(kwargs, image=image, name=name, labels=labels)
        container = MagicMock()
        container.id = container_id
        return container

    def _start(self, container_id):
        if container_id not in self.containers:
            raise NotFound(f"No such container: {container_id}")
        self.containers[container_id]["State"] = "running"

    def _remove(self, container_id, v=False, force=False):
        if container_id not in self.containers:
            raise NotFound(f"No such container: {container_id}")
        del self.containers[container_id]

    def names(self) -> List[str]:
        return [name for entry in self.containers.values() for name in entry["Names"]]


@pytest.fixture
def fake_engine():
    return FakeDockerEngine(images=["busybox:latest"])


@pytest.fixture
def fake_manager(fake_engine, pull_sink):
    return ContainerManager(EngineHandle.from_client(fake_engine.client), pull_output=pull_sink)
