"""Container lifecycle management."""

import json
import sys
from typing import Any, Dict, List, Optional, TextIO, Tuple

import structlog
from docker.utils import parse_repository_tag

from ...config import settings
from ...models.container import ContainerConfig, ContainerRecord
from ...models.errors import (
    CanceledError,
    ConflictError,
    CreateError,
    ImagePullError,
    InvalidPortError,
    InvalidSpecError,
    StartError,
)
from .client import EngineHandle
from .inventory import ContainerInventory
from .spec import ContainerSpec

logger = structlog.get_logger(__name__)

# Published ports are bound on every host interface.
HOST_IP = "0.0.0.0"
PORT_PROTOCOL = "tcp"

PortBindings = Dict[str, List[Tuple[str, int]]]


def parse_port(value: str, protocol: Optional[str] = None) -> int:
    """Parse a TCP port number, optionally suffixed with "/<protocol>".

    Raises:
        InvalidPortError: The value is not an integer in 1..65535
    """
    text = str(value).strip()
    if protocol and text.endswith("/" + protocol):
        text = text[: -len(protocol) - 1]
    if not (text.isascii() and text.isdigit()) or not 1 <= int(text) <= 65535:
        raise InvalidPortError(str(value))
    return int(text)


def parse_port_range(value: str, protocol: Optional[str] = None) -> List[int]:
    """Parse a single port or an inclusive "start-end" range.

    Raises:
        InvalidPortError: A bound is not a valid port, or start > end
    """
    text = str(value).strip()
    if protocol and text.endswith("/" + protocol):
        text = text[: -len(protocol) - 1]
    if "-" not in text:
        return [parse_port(value, protocol)]
    start_text, _, end_text = text.partition("-")
    try:
        start, end = parse_port(start_text), parse_port(end_text)
    except InvalidPortError:
        raise InvalidPortError(str(value)) from None
    if start > end:
        raise InvalidPortError(str(value))
    return list(range(start, end + 1))


def build_port_bindings(ports: Dict[str, str]) -> PortBindings:
    """Translate host->container port mappings into engine port bindings.

    Each container port becomes "<port>/tcp" bound on 0.0.0.0 at every host
    port mapped to it. A host range and a container range of the same length
    ("8000-8002" -> "80-82") are paired port by port.

    Raises:
        InvalidPortError: A host or container port is not a valid TCP port,
            or the two ranges differ in length
    """
    bindings: PortBindings = {}
    for host_port, container_port in ports.items():
        host_ports = parse_port_range(host_port)
        container_ports = parse_port_range(container_port, PORT_PROTOCOL)
        if len(host_ports) != len(container_ports):
            raise InvalidPortError(f"{host_port}:{container_port}")
        for host, container in zip(host_ports, container_ports):
            key = f"{container}/{PORT_PROTOCOL}"
            bindings.setdefault(key, []).append((HOST_IP, host))
    return bindings


def image_candidates(image: str) -> Tuple[List[str], bool]:
    """Names a local image may carry to satisfy `image`.

    Returns the candidate references and whether they are repo digests.
    """
    if "@" in image:
        return [image], True
    repository, tag = parse_repository_tag(image)
    if tag:
        return [image], False
    return [image, f"{repository}:latest"], False


class ContainerManager:
    """Manages Docker container lifecycle operations.

    The manager borrows an EngineHandle owned by the caller and holds no other
    mutable state, so one manager can be shared between threads.
    """

    def __init__(
        self,
        engine: EngineHandle,
        inventory: Optional[ContainerInventory] = None,
        pull_output: Optional[TextIO] = None,
    ):
        self.engine = engine
        self.inventory = inventory or ContainerInventory(engine)
        self._pull_output = pull_output

    @property
    def pull_output(self) -> Optional[TextIO]:
        """Sink receiving image pull progress, or None when progress is disabled."""
        if self._pull_output is not None:
            return self._pull_output
        if settings.docker_pull_progress:
            return sys.stdout
        return None

    def define_container(self, image: str) -> ContainerSpec:
        """Begin declaring a container via the fluent builder."""
        return ContainerSpec(image, manager=self)

    # ------------------------------------------------------------------
    # Image resolution
    # ------------------------------------------------------------------

    def has_image(self, image: str) -> bool:
        """Check the local image inventory for an exact reference match.

        Matches against the tags and digests carried by the image listing
        itself, without inspecting each image.
        """
        candidates, by_digest = image_candidates(image)
        field = "RepoDigests" if by_digest else "RepoTags"
        with self.engine.engine_call("list images") as client:
            images = client.api.images(all=True)
        for local in images:
            names = local.get(field) or []
            if any(candidate in names for candidate in candidates):
                return True
        return False

    def pull_image(self, image: str) -> None:
        """Pull an image from its registry, streaming progress to the pull sink.

        The handle's cancellation is checked on every progress message, so a
        canceled handle aborts the pull even while the stream is still open.

        Raises:
            ImagePullError: The registry pull failed
            CanceledError: The handle was canceled during the pull
        """
        if "@" in image:
            repository, tag = image, None
        else:
            repository, tag = parse_repository_tag(image)
            tag = tag or "latest"
        sink = self.pull_output

        logger.info("Pulling Docker image", image=image)
        with self.engine.engine_call(
            "pull image", on_error=lambda e: ImagePullError(image, e)
        ) as client:
            stream = client.api.pull(repository, tag=tag, stream=True, decode=True)
            try:
                for event in stream:
                    if self.engine.cancelled:
                        raise CanceledError("pull image")
                    if "error" in event:
                        raise ImagePullError(image, event.get("error"))
                    if sink is not None:
                        sink.write(self._format_pull_event(event) + "\n")
            finally:
                close = getattr(stream, "close", None)
                if close is not None:
                    close()
            if sink is not None:
                sink.flush()
        logger.info("Successfully pulled image", image=image)

    @staticmethod
    def _format_pull_event(event: Dict[str, Any]) -> str:
        parts = [event.get("id"), event.get("status"), event.get("progress")]
        text = " ".join(str(part) for part in parts if part)
        return text or json.dumps(event)

    def ensure_image(self, image: str) -> bool:
        """Make sure the image exists locally, pulling it if needed.

        Returns:
            True if the image was already present, False if it was pulled
        """
        if self.has_image(image):
            logger.debug("Image present locally", image=image)
            return True
        self.pull_image(image)
        return False

    # ------------------------------------------------------------------
    # Realization
    # ------------------------------------------------------------------

    def realize(self, spec: ContainerConfig | ContainerSpec) -> str:
        """Create and start a container from its declaration.

        Steps run strictly in order and stop at the first failure: image
        resolution, name conflict check, create, start. Port translation is
        pure and runs before any engine call.

        Args:
            spec: Container declaration, or a builder holding one

        Returns:
            Identifier of the running container

        Raises:
            InvalidSpecError: The image is empty
            InvalidPortError: A port mapping is malformed
            ImagePullError: The image is absent locally and the pull failed
            ConflictError: A container with the requested name already exists
            CreateError: The engine rejected the create request
            StartError: The container was created but could not be started
        """
        config = spec.config if isinstance(spec, ContainerSpec) else spec
        if not config.image or not config.image.strip():
            raise InvalidSpecError("Container image must not be empty", details={"name": config.name})

        port_bindings = build_port_bindings(config.ports)
        log = logger.bind(image=config.image, name=config.name or None)

        self.ensure_image(config.image)

        if config.name:
            existing_id = self.inventory.find_by_name(config.name)
            if existing_id:
                log.warning("Container name already in use", container_id=existing_id)
                raise ConflictError(config.name, existing_id)

        container_id = self._create(config, port_bindings)
        log = log.bind(container_id=container_id)
        log.info("Created container")

        self._start(container_id)
        log.info("Started container")
        return container_id

    def _create(self, config: ContainerConfig, port_bindings: PortBindings) -> str:
        container_config: Dict[str, Any] = {
            "image": config.image,
            "environment": config.environment(),
            "auto_remove": config.auto_remove,
            "ports": port_bindings,
            "labels": dict(config.labels),
        }
        if config.name:
            container_config["name"] = config.name
        if config.entry_point:
            container_config["entrypoint"] = list(config.entry_point)

        with self.engine.engine_call(
            "create container",
            on_error=lambda e: CreateError(e, name=config.name, image=config.image),
        ) as client:
            container = client.containers.create(**container_config)
        return container.id

    def _start(self, container_id: str) -> None:
        # A container whose start fails is left in place for the caller to inspect
        with self.engine.engine_call(
            "start container", on_error=lambda e: StartError(container_id, e)
        ) as client:
            client.api.start(container_id)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def remove_container(self, container_id: str) -> None:
        """Force-remove a container (stopping it if running) and its anonymous volumes.

        Raises:
            NotFoundError: No container has this identifier
        """
        with self.engine.engine_call("remove container", resource_id=container_id) as client:
            client.api.remove_container(container_id, v=True, force=True)
        logger.info("Removed container", container_id=container_id)

    # ------------------------------------------------------------------
    # Inventory shortcuts
    # ------------------------------------------------------------------

    def find_container_by_name(self, name: str) -> Optional[str]:
        return self.inventory.find_by_name(name)

    def list_containers_by_label(self, key: str, value: str) -> List[ContainerRecord]:
        return self.inventory.find_by_label(key, value)

    def get_container_state(self, container_id: str) -> str:
        return self.inventory.get_state(container_id)
