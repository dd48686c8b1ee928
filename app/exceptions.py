"""Service-level exceptions.

Services raise these; endpoint handlers translate them into HTTP responses
(ValidationFailed -> 400, NotFoundError -> 404, ConflictError -> 409). Remote
catalog failures are never raised, they travel as ``Failure`` values.
"""
from __future__ import annotations


class StorefrontError(Exception):
    """Base class for domain errors raised by services."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationFailed(StorefrontError):
    """Malformed or missing input (bad ASIN, empty product name, percent out of range)."""


class NotFoundError(StorefrontError):
    """Referenced click, transaction or item does not exist."""


class ConflictError(StorefrontError):
    """State transition not allowed (e.g. transaction already processed)."""


__all__ = ["StorefrontError", "ValidationFailed", "NotFoundError", "ConflictError"]
