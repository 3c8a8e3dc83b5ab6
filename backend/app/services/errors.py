"""Exception types shared by the service layer."""

from __future__ import annotations


class ResourceNotFoundError(ValueError):
    """Raised when a record does not exist in the caller's organization."""


class ServiceStateError(RuntimeError):
    """Raised when an operation is not allowed in the record's current state."""
