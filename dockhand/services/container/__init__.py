"""Container management services.

This package provides Docker container lifecycle control split into:
- client.py: Engine handle (connection, cancellation, guarded engine calls)
- spec.py: Fluent container declaration builder
- inventory.py: Container discovery queries
- manager.py: Image resolution, create/start, and teardown
"""

from .client import EngineHandle
from .inventory import ContainerInventory
from .manager import ContainerManager
from .spec import ContainerSpec

__all__ = ["ContainerInventory", "ContainerManager", "ContainerSpec", "EngineHandle"]
