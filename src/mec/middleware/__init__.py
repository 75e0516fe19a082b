"""Middleware protocol and built-in middleware."""

from mec.middleware.protocol import Middleware, Next
from mec.middleware.static import StaticFiles

__all__ = ["Middleware", "Next", "StaticFiles"]
