"""API route modules."""

from . import collection, health

__all__ = ["health", "collection"]
