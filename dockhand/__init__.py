"""Client-side lifecycle control for single containers on a Docker engine.

Usage:
    from dockhand import ContainerManager, EngineHandle

    with EngineHandle() as engine:
        manager = ContainerManager(engine)
        container_id = (
            manager.define_container("busybox:latest")
            .name("busybox")
            .entry_point("tail", "-f", "/dev/null")
            .label("group", "core")
            .run()
        )
"""

from ._version import __version__
from .models import (
    CanceledError,
    ConflictError,
    ContainerConfig,
    ContainerRecord,
    ContainerState,
    CreateError,
    DockhandError,
    EngineConnectionError,
    ImagePullError,
    InvalidPortError,
    InvalidSpecError,
    NotFoundError,
    StartError,
)
from .services.container import (
    ContainerInventory,
    ContainerManager,
    ContainerSpec,
    EngineHandle,
)

__all__ = [
    "__version__",
    "CanceledError",
    "ConflictError",
    "ContainerConfig",
    "ContainerInventory",
    "ContainerManager",
    "ContainerRecord",
    "ContainerSpec",
    "ContainerState",
    "CreateError",
    "DockhandError",
    "EngineConnectionError",
    "EngineHandle",
    "ImagePullError",
    "InvalidPortError",
    "InvalidSpecError",
    "NotFoundError",
    "StartError",
]
