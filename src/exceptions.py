"""Custom exception classes for the exam scheduling API.

All domain-level errors should be raised as one of these typed exceptions so
that FastAPI exception handlers can convert them to structured HTTP responses.
"""

from __future__ import annotations

from datetime import date


class ValidationError(Exception):
    """Raised when a request is missing required data or breaks a field rule.

    Args:
        message: Human-readable description of what is missing or invalid.
        field: Name of the offending field, when one applies.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field: str | None = field


class NotFoundError(Exception):
    """Raised when a referenced staff, subject, department or record is absent.

    Args:
        entity: Kind of record that was looked up (e.g. ``"staff"``).
        identifier: The id or key that was not found.
    """

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity.capitalize()} {identifier!r} not found")
        self.entity: str = entity
        self.identifier: object = identifier


class ConflictError(Exception):
    """Raised when committing a schedule would break a scheduling invariant.

    The message is user-correctable and surfaced verbatim.

    Args:
        message: Description of the clash.
        pinned_date: Date already fixed for a shared subject, when the clash
            is a shared-subject date mismatch.
        department: Department that owns the clashing schedule.
    """

    def __init__(
        self,
        message: str,
        pinned_date: date | None = None,
        department: str | None = None,
    ) -> None:
        super().__init__(message)
        self.pinned_date: date | None = pinned_date
        self.department: str | None = department


class AuthenticationError(Exception):
    """Raised when credentials or a bearer token cannot be verified."""


class PermissionDeniedError(Exception):
    """Raised when an authenticated user acts outside their role.

    Args:
        message: What the user attempted.
        role: The role the user holds.
    """

    def __init__(self, message: str, role: str | None = None) -> None:
        super().__init__(message)
        self.role: str | None = role


class DatabaseConnectionError(Exception):
    """Raised when a connection to PostgreSQL cannot be established.

    Args:
        message: Detail from the underlying driver exception.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
