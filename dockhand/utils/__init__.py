"""Utility modules for dockhand."""
