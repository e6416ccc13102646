"""Common middleware for Eventify."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
