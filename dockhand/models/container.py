"""Data models for container declarations and engine-observed records.

ContainerConfig is the declared, not-yet-realized shape of a container.
ContainerRecord is a read-only snapshot of a container as the engine reports
it in a listing; records are never cached, every query builds fresh ones.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# The engine stores container names with a leading path separator ("/busybox").
NAME_SEPARATOR = "/"


class ContainerState(str, Enum):
    """Lifecycle state of a container as reported by the engine."""

    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    RESTARTING = "restarting"
    REMOVING = "removing"
    EXITED = "exited"
    DEAD = "dead"


@dataclass
class ContainerConfig:
    """Declaration of a desired container."""

    image: str
    name: str = ""
    ports: Dict[str, str] = field(default_factory=dict)  # host port -> container port
    vars: Dict[str, str] = field(default_factory=dict)
    entry_point: List[str] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    auto_remove: bool = True

    def copy(self) -> "ContainerConfig":
        """Return an independent copy of this declaration."""
        return ContainerConfig(
            image=self.image,
            name=self.name,
            ports=dict(self.ports),
            vars=dict(self.vars),
            entry_point=list(self.entry_point),
            labels=dict(self.labels),
            auto_remove=self.auto_remove,
        )

    def environment(self) -> List[str]:
        """Environment as KEY=VALUE strings."""
        return [f"{key}={value}" for key, value in self.vars.items()]


@dataclass(frozen=True)
class ContainerRecord:
    """Snapshot of one container from an engine listing."""

    id: str
    names: Tuple[str, ...]
    state: str
    labels: Dict[str, str] = field(default_factory=dict, hash=False)
    image: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContainerRecord":
        """Build a record from a container listing entry (engine field names)."""
        return cls(
            id=data.get("Id", ""),
            names=tuple(data.get("Names") or ()),
            state=data.get("State", ""),
            labels=dict(data.get("Labels") or {}),
            image=data.get("Image"),
            status=data.get("Status"),
        )

    @property
    def name(self) -> Optional[str]:
        """First container name without the engine's separator prefix."""
        if not self.names:
            return None
        return self.names[0].lstrip(NAME_SEPARATOR)

    def has_name(self, name: str) -> bool:
        """Exact match against the engine's internal name representation."""
        return NAME_SEPARATOR + name in self.names

    def has_label(self, key: str, value: str) -> bool:
        return key in self.labels and self.labels[key] == value

    @property
    def is_running(self) -> bool:
        return self.state == ContainerState.RUNNING.value
