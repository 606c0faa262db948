"""
Errors raised by the inspection core.

The HTTP layer maps them to responses:
- ValidationError -> 400
- NotFoundError   -> 404
- StorageError    -> 500
ConflictError never leaves the service that raised it.
"""

from typing import List, Optional


class MaintenanceError(Exception):
    """Base class; `message` is safe to show to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MaintenanceError):
    """Input is malformed or breaks a submission rule."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationError":
        return cls("\n".join(errors), errors)


class NotFoundError(MaintenanceError):
    """A referenced row does not exist."""

    def __init__(self, entity: str, key):
        super().__init__(f"{entity} {key} not found.")
        self.entity = entity
        self.key = key


class ConflictError(MaintenanceError):
    """A unique constraint was hit by a concurrent insert."""


class StorageError(MaintenanceError):
    """Unexpected database failure. The transaction has been rolled back."""

    def __init__(self, message: str = "The inspection store failed to complete the operation."):
        super().__init__(message)
