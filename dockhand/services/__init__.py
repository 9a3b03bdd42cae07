"""Service layer for dockhand."""
