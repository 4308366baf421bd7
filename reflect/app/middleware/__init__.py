"""HTTP middleware for Reflect."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
