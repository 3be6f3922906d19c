"""External service integrations."""

from .ses import SESError, SESService

__all__ = ["SESError", "SESService"]
