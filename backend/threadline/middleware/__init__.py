"""
Middleware package.
"""

from .logging import LoggingMiddleware, get_logger

__all__ = ["LoggingMiddleware", "get_logger"]
