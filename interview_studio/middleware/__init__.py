"""HTTP middleware: authentication, request logging and error handling."""

from .auth import AuthMiddleware
from .error_handler import setup_exception_handlers
from .logging import LoggingMiddleware, configure_logging

__all__ = ["AuthMiddleware", "LoggingMiddleware", "configure_logging", "setup_exception_handlers"]
