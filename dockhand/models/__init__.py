"""Data models for dockhand."""

from .container import (
    NAME_SEPARATOR,
    ContainerConfig,
    ContainerRecord,
    ContainerState,
)
from .errors import (
    CanceledError,
    ConflictError,
    CreateError,
    DockhandError,
    EngineConnectionError,
    ErrorType,
    ImagePullError,
    InvalidPortError,
    InvalidSpecError,
    NotFoundError,
    StartError,
)

__all__ = [
    # Container models
    "NAME_SEPARATOR",
    "ContainerConfig",
    "ContainerRecord",
    "ContainerState",
    # Errors
    "CanceledError",
    "ConflictError",
    "CreateError",
    "DockhandError",
    "EngineConnectionError",
    "ErrorType",
    "ImagePullError",
    "InvalidPortError",
    "InvalidSpecError",
    "NotFoundError",
    "StartError",
]
