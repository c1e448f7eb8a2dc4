from __future__ import annotations

from typing import Any, Optional


class RecordsError(Exception):
    """Base class for domain errors raised by repositories and services."""

    error_type = "records_error"

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(RecordsError):
    """
    A request was rejected before anything was written.

    Raised for missing or malformed fields, duplicate emails, grade bounds and,
    when reference checks are enabled, ids that point nowhere.
    """

    error_type = "validation_error"


class PermissionDenied(RecordsError):
    """The acting user's role or ownership does not allow the operation."""

    error_type = "permission_denied"
