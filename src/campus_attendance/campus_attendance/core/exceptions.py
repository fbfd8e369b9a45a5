from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials or access tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a directory lookup (institution/teacher/student) fails."""


class TokenError(DomainError):
    """Base for QR session token failures. ``reason`` is a stable short code."""

    reason = "invalid"


class MalformedToken(TokenError):
    reason = "malformed"


class InvalidSignature(TokenError):
    reason = "invalid_signature"


class TokenExpired(TokenError):
    reason = "expired"


class WrongTokenKind(DomainError):
    """Token decoded fine but was submitted to the endpoint of another kind."""


class DuplicateSession(DomainError):
    """A record already exists for (session_id, student_id)."""

    def __init__(self, message: str, existing: Optional[Any] = None):
        super().__init__(message)
        self.existing = existing


class AlreadyCompleted(DomainError):
    """Teacher self-attendance for the day is already checked in and out."""

    def __init__(self, message: str, record: Optional[Any] = None):
        super().__init__(message)
        self.record = record


class DuplicateRecordError(Exception):
    """Storage-level unique key conflict (insert-if-absent lost)."""
