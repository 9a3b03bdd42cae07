"""Docker engine handle: connection, cancellation, and guarded engine calls."""

import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

import docker
import structlog
from docker.errors import DockerException
from requests.exceptions import RequestException
from urllib3.exceptions import HTTPError as TransportError

from ...config import settings
from ...models.errors import (
    CanceledError,
    DockhandError,
    EngineConnectionError,
    ErrorType,
)
from ...utils.error_handlers import handle_docker_error

logger = structlog.get_logger(__name__)


class EngineHandle:
    """Long-lived, shareable connection to the Docker daemon.

    The daemon connection is created on first use. The handle also acts as the
    execution context for every engine call made through it: once canceled,
    in-flight and subsequent calls fail with CanceledError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        api_version: Optional[str] = None,
    ):
        """Initialize the handle without blocking operations."""
        config = settings.docker
        self.base_url = base_url if base_url is not None else config.base_url
        self.timeout = timeout if timeout is not None else config.timeout
        self.api_version = api_version if api_version is not None else config.api_version

        self.client: Optional[docker.DockerClient] = None
        self._initialization_error: Optional[str] = None
        self._initialization_attempted: bool = False
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        logger.debug(
            "EngineHandle initialized (client will be created on first use)",
            base_url=self.base_url or "<environment>",
        )

    @classmethod
    def from_client(cls, client: docker.DockerClient) -> "EngineHandle":
        """Wrap an already-connected Docker client."""
        handle = cls()
        handle.client = client
        handle._initialization_attempted = True
        return handle

    def _create_client(self) -> docker.DockerClient:
        if self.base_url:
            return docker.DockerClient(
                base_url=self.base_url,
                timeout=self.timeout,
                version=self.api_version,
            )
        return docker.from_env(timeout=self.timeout, version=self.api_version)

    def _ensure_client(self) -> bool:
        """Ensure Docker client is initialized. Returns True if successful."""
        if self.client is not None:
            return True

        with self._lock:
            if self.client is not None:
                return True

            if self._initialization_attempted and self._initialization_error:
                return False

            self._initialization_attempted = True
            client = None
            try:
                logger.info("Connecting to Docker engine", base_url=self.base_url or "<environment>")
                client = self._create_client()
                client.ping()
            except (DockerException, RequestException) as e:
                self._initialization_error = str(e)
                logger.error("Failed to connect to Docker engine", error=str(e))
                if client is not None:
                    client.close()
                return False

            self.client = client
            logger.info("Docker engine connection established")
            return True

    def is_available(self) -> bool:
        """Check if the Docker engine is reachable."""
        if self.cancelled:
            return False
        return self._ensure_client()

    def get_initialization_error(self) -> Optional[str]:
        """Get Docker initialization error if any."""
        return self._initialization_error

    def reset_initialization(self) -> None:
        """Reset initialization state to allow retry."""
        with self._lock:
            self._initialization_attempted = False
            self._initialization_error = None
            if self.client is not None:
                self.client.close()
                self.client = None
        logger.info("Docker client initialization state reset")

    def get_client(self, operation: str = "engine call") -> docker.DockerClient:
        """Get the Docker client, connecting if needed.

        Raises:
            CanceledError: The handle has been canceled
            EngineConnectionError: The daemon cannot be reached
        """
        if self.cancelled:
            raise CanceledError(operation)
        if not self._ensure_client():
            message = f"Cannot {operation}: Docker engine not available"
            if self._initialization_error:
                message += f" - {self._initialization_error}"
            raise EngineConnectionError(message=message, details={"operation": operation})
        return self.client

    @contextmanager
    def engine_call(
        self,
        operation: str,
        resource_id: Optional[str] = None,
        on_error: Optional[Callable[[Exception], DockhandError]] = None,
    ) -> Iterator[docker.DockerClient]:
        """Run one engine round trip, translating SDK errors.

        Cancellation, connection loss and (when resource_id is given) unknown
        identifiers always map to their dedicated exceptions. Any other engine
        error is passed to on_error when provided, otherwise it becomes a
        generic DockhandError. urllib3 errors raised while a streamed response
        is being read are translated the same way.
        """
        client = self.get_client(operation)
        try:
            yield client
        except (DockerException, RequestException, TransportError) as e:
            error = handle_docker_error(
                e,
                operation=operation,
                cancelled=self.cancelled,
                resource_id=resource_id,
            )
            if on_error is not None and error.error_type == ErrorType.ENGINE:
                error = on_error(e)
            logger.debug("Engine call failed", **{"operation": operation, **error.to_dict()})
            raise error from e

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Cancel the handle, aborting in-flight calls by closing the connection."""
        if self.cancelled:
            return
        self._cancelled.set()
        logger.info("Engine handle canceled")
        if self.client is not None:
            self.client.close()

    def version(self) -> Dict[str, Any]:
        """Get the daemon's version report."""
        with self.engine_call("get engine version") as client:
            return client.version()

    def close(self) -> None:
        """Close Docker client connection."""
        try:
            if self.client is not None:
                self.client.close()
        except (DockerException, RequestException) as e:
            logger.error(f"Error closing Docker client: {e}")
        finally:
            self.client = None

    def __enter__(self) -> "EngineHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
