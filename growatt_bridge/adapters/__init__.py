"""External system adapters for growatt-bridge."""

from .portal import PortalClient

__all__ = ["PortalClient"]
