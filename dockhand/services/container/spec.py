"""Fluent builder for container declarations."""

from typing import TYPE_CHECKING, Dict, Optional

from ...models.container import ContainerConfig
from ...models.errors import InvalidSpecError

if TYPE_CHECKING:
    from .manager import ContainerManager


class ContainerSpec:
    """Mutable declaration of a desired container.

    Every configuration call mutates this builder and returns it, so calls can
    be chained. No call performs I/O or validation; both happen in run().

        spec = (
            manager.define_container("busybox:latest")
            .name("busybox")
            .port("8080", "80")
            .var("MODE", "test")
            .entry_point("tail", "-f", "/dev/null")
            .label("group", "core")
        )
        container_id = spec.run()
    """

    def __init__(self, image: str, manager: Optional["ContainerManager"] = None):
        self._config = ContainerConfig(image=image)
        self._manager = manager

    @property
    def config(self) -> ContainerConfig:
        """Snapshot of the declaration built so far."""
        return self._config.copy()

    @property
    def image(self) -> str:
        return self._config.image

    def name(self, value: str) -> "ContainerSpec":
        """Set the container name (empty lets the engine generate one)."""
        self._config.name = value
        return self

    def port(self, external: str, internal: str) -> "ContainerSpec":
        """Map host port `external` to container port `internal`."""
        self._config.ports[str(external)] = str(internal)
        return self

    def ports(self, ports: Dict[str, str]) -> "ContainerSpec":
        for external, internal in ports.items():
            self.port(external, internal)
        return self

    def var(self, key: str, value: str) -> "ContainerSpec":
        """Set an environment variable."""
        self._config.vars[key] = value
        return self

    def vars(self, variables: Dict[str, str]) -> "ContainerSpec":
        self._config.vars.update(variables)
        return self

    def entry_point(self, *args: str) -> "ContainerSpec":
        """Append arguments to the entrypoint.

        Repeated calls accumulate: entry_point("a") followed by
        entry_point("b", "c") yields ["a", "b", "c"].
        """
        self._config.entry_point.extend(args)
        return self

    def label(self, key: str, value: str) -> "ContainerSpec":
        self._config.labels[key] = value
        return self

    def labels(self, labels: Dict[str, str]) -> "ContainerSpec":
        self._config.labels.update(labels)
        return self

    def auto_remove(self, value: bool) -> "ContainerSpec":
        """Whether the engine removes the container once it stops (default True)."""
        self._config.auto_remove = value
        return self

    def run(self) -> str:
        """Create and start the container, returning its identifier.

        There are no update semantics: running the same spec twice asks the
        engine for a second container.
        """
        if self._manager is None:
            raise InvalidSpecError(
                "Container spec is not bound to a manager; use ContainerManager.define_container()",
                details={"image": self._config.image},
            )
        return self._manager.realize(self._config)

    def __repr__(self) -> str:
        return f"ContainerSpec(image={self._config.image!r}, name={self._config.name!r})"
