from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or a required field is missing.

    ``field`` names the offending field when there is one, so callers can
    highlight it.
    """

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError):
    """Raised when a referenced student or record does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class SubmissionError(DomainError):
    """Raised when the bulk write of staged attendance fails.

    ``results`` carries per-record detail when the store reported it.
    """

    def __init__(self, message: str, *, results: Sequence = ()):
        super().__init__(message)
        self.results = list(results)


class DataShapeError(DomainError):
    """Raised when a date-like value cannot be interpreted."""
