from __future__ import annotations


class QuickTaskError(Exception):
    """Base class for application errors."""


class NotAuthenticatedError(QuickTaskError):
    """Raised when an action needs a signed-in user and there is none."""


class TaskValidationError(QuickTaskError, ValueError):
    """Raised for task input that can never be stored."""


class RemoteQueryError(QuickTaskError):
    """A database call failed. Wraps the driver/ORM error."""

    def __init__(self, operation: str, cause: Exception) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class TaskStoreError(QuickTaskError):
    """User-facing failure of a store mutation."""


class AuthError(QuickTaskError):
    """Authentication failure; the message is safe to show to the user."""
