"""Translation of Docker SDK errors into dockhand exceptions."""

from typing import Optional

import structlog
from docker.errors import APIError, DockerException, NotFound
from requests.exceptions import ConnectionError as RequestsConnectionError

from ..models.errors import (
    CanceledError,
    DockhandError,
    EngineConnectionError,
    ErrorType,
    NotFoundError,
)

logger = structlog.get_logger(__name__)


def describe_docker_error(error: Exception) -> str:
    """Return the most specific human-readable reason carried by an engine error."""
    if isinstance(error, APIError) and error.explanation:
        return str(error.explanation)
    return str(error) or type(error).__name__


def is_connection_error(error: Exception) -> bool:
    """Check whether the error means the daemon could not be reached at all."""
    if isinstance(error, RequestsConnectionError):
        return True
    # docker.from_env() wraps transport failures during version negotiation
    if isinstance(error, DockerException) and not isinstance(error, APIError):
        return "Error while fetching server API version" in str(error)
    return False


def handle_docker_error(
    error: Exception,
    operation: str = "engine call",
    cancelled: bool = False,
    resource_id: Optional[str] = None,
) -> DockhandError:
    """Convert Docker errors to the matching dockhand exception.

    Args:
        error: Exception raised by the Docker SDK or its transport (requests,
            or urllib3 while reading a streamed response)
        operation: Name of the engine call, used in messages
        cancelled: Whether the engine handle was canceled
        resource_id: Container identifier the call addressed; when given, a
            404 from the engine becomes a NotFoundError for that identifier

    Returns:
        The translated exception. Errors with no specific mapping become a
        generic DockhandError of type ENGINE.
    """
    if cancelled:
        return CanceledError(operation)

    if is_connection_error(error):
        return EngineConnectionError(
            message=f"Container engine is not reachable during {operation}: {error}",
            details={"operation": operation},
        )

    if isinstance(error, NotFound) and resource_id is not None:
        return NotFoundError(resource_id)

    return DockhandError(
        message=f"Docker API error during {operation}: {describe_docker_error(error)}",
        error_type=ErrorType.ENGINE,
        details={"operation": operation},
    )
