"""Error models and exception classes for dockhand."""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(str, Enum):
    """Error type enumeration."""

    CONNECTION = "connection"
    IMAGE_PULL = "image_pull"
    CONFLICT = "conflict"
    INVALID_PORT = "invalid_port"
    INVALID_SPEC = "invalid_spec"
    CREATE_FAILED = "create_failed"
    START_FAILED = "start_failed"
    NOT_FOUND = "not_found"
    CANCELED = "canceled"
    ENGINE = "engine"


# Custom Exception Classes


class DockhandError(Exception):
    """Base exception for container lifecycle operations."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.ENGINE,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_type = error_type
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as a flat mapping suitable for structured logs."""
        data: Dict[str, Any] = {
            "error": self.message,
            "error_type": self.error_type.value,
        }
        data.update(self.details)
        if self.__cause__ is not None:
            data["cause"] = str(self.__cause__)
        return data


class EngineConnectionError(DockhandError):
    """The container engine cannot be reached."""

    def __init__(self, message: str = "Container engine is not reachable", **kwargs):
        super().__init__(message=message, error_type=ErrorType.CONNECTION, **kwargs)


class ImagePullError(DockhandError):
    """Image is absent locally and pulling it from the registry failed."""

    def __init__(self, image: str, cause: Any = None):
        self.image = image
        self.cause = cause
        message = f"Failed to pull image {image}"
        if cause:
            message += f": {cause}"
        super().__init__(
            message=message,
            error_type=ErrorType.IMAGE_PULL,
            details={"image": image},
        )


class ConflictError(DockhandError):
    """A container with the requested name already exists."""

    def __init__(self, name: str, existing_id: str):
        self.name = name
        self.existing_id = existing_id
        super().__init__(
            message=f"Container {name} already exists ({existing_id})",
            error_type=ErrorType.CONFLICT,
            details={"name": name, "container_id": existing_id},
        )


class InvalidPortError(DockhandError):
    """Malformed port specification."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(
            message=f"Unable to bind to port tcp:{value}",
            error_type=ErrorType.INVALID_PORT,
            details={"port": value},
        )


class InvalidSpecError(DockhandError):
    """The container declaration cannot be realized as given."""

    def __init__(self, message: str = "Invalid container specification", **kwargs):
        super().__init__(message=message, error_type=ErrorType.INVALID_SPEC, **kwargs)


class CreateError(DockhandError):
    """The engine rejected the create request."""

    def __init__(self, cause: Any, name: Optional[str] = None, image: Optional[str] = None):
        self.cause = cause
        self.name = name
        self.image = image
        details = {"image": image}
        if name:
            details["name"] = name
        super().__init__(
            message=f"Failed to create container {name or '<generated>'}: {cause}",
            error_type=ErrorType.CREATE_FAILED,
            details=details,
        )


class StartError(DockhandError):
    """The engine rejected the start request; the container exists but is not running."""

    def __init__(self, container_id: str, cause: Any):
        self.container_id = container_id
        self.cause = cause
        super().__init__(
            message=f"Failed to start container {container_id}: {cause}",
            error_type=ErrorType.START_FAILED,
            details={"container_id": container_id},
        )


class NotFoundError(DockhandError):
    """No container matches the identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            message=f"Container {identifier} not found",
            error_type=ErrorType.NOT_FOUND,
            details={"container_id": identifier},
        )


class CanceledError(DockhandError):
    """The engine handle was canceled while or before the call ran."""

    def __init__(self, operation: str = "engine call"):
        self.operation = operation
        super().__init__(
            message=f"{operation} canceled",
            error_type=ErrorType.CANCELED,
            details={"operation": operation},
        )
