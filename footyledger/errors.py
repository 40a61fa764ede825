"""Custom exception classes for the application.

Every error carries a stable ``reason`` string that is safe to show to API
clients; ``message`` is a short human readable description.
"""

from __future__ import annotations


class AppError(Exception):
    """Base application error class."""

    reason = "app_error"

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def to_dict(self):
        """Return the client-facing representation of the error."""
        return {"error": self.reason, "message": self.message}


class NotAuthenticatedError(AppError):
    """Raised when an operation needs a logged in principal and there is none."""

    reason = "not_authenticated"

    def __init__(self, message="Not authenticated."):
        """Initialize the error."""
        super().__init__(message, 401)


class ForbiddenError(AppError):
    """Raised when the principal may not act on the resource."""

    reason = "forbidden"

    def __init__(self, message="Forbidden."):
        """Initialize the error."""
        super().__init__(message, 403)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    reason = "not_found"

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)


class InvalidIdentifierError(AppError):
    """Raised when an identifier is not well-formed."""

    reason = "invalid_identifier"

    def __init__(self, message="Invalid identifier."):
        """Initialize the error."""
        super().__init__(message, 400)


class ValidationError(AppError):
    """Raised when user input fails validation."""

    reason = "validation_failed"

    def __init__(self, field=None, detail="invalid", message=None):
        """Initialize the error."""
        if message is None:
            message = (
                f"Invalid value for '{field}'." if field else "Validation failed."
            )
        super().__init__(message, 400)
        self.field = field
        self.detail = detail

    def to_dict(self):
        """Include the offending field and the detail code."""
        data = super().to_dict()
        data["field"] = self.field
        data["detail"] = self.detail
        return data


class DuplicateResourceError(AppError):
    """Raised when trying to create a resource that already exists."""

    reason = "conflict"

    def __init__(self, message="Resource already exists."):
        """Initialize the error."""
        super().__init__(message, 409)


class StoreUnavailableError(AppError):
    """Raised when the document store cannot be reached."""

    reason = "store_unavailable"

    def __init__(self, message="The data store is temporarily unavailable."):
        """Initialize the error."""
        super().__init__(message, 503)
