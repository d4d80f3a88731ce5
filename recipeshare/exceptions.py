"""
RecipeShare API: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for each failure the recipe workflows
       can hit.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       structured JSON error responses with the matching HTTP status code.
Who:   Raised by services, the upload intake and dependencies; caught by the
       global handlers.

Exception Hierarchy:
    RecipeShareError (base)
    ├── ValidationError          → 400 Bad Request (bad file type, bad field)
    ├── AuthenticationError      → 401 Unauthorized (no caller identity)
    ├── PermissionDeniedError    → 403 Forbidden (caller is not the author)
    ├── NotFoundError            → 404 Not Found
    ├── ImageUploadError         → 502 Bad Gateway (image host rejected upload)
    ├── ImageDeletionError       → 502 Bad Gateway (image host rejected destroy)
    └── PersistenceError         → 500 Internal Server Error (record store)

Nothing in this hierarchy is retried. Every error ends the current request.
"""

from typing import Any, Dict, Optional


class RecipeShareError(Exception):
    """
    Base exception for all RecipeShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RecipeShareError):
    """
    Raised when client input fails validation.

    When:    Upload filename is not an image, file too large, bad form field.
    HTTP:    400 Bad Request
    Always raised before any record-store or image-store mutation.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(RecipeShareError):
    """Raised when a mutating request carries no caller identity (401)."""

    def __init__(
        self,
        message: str = "You need to be logged in to do that",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(RecipeShareError):
    """Raised when the caller is not the recipe's author (403)."""

    def __init__(
        self,
        message: str = "You don't have permission to do that",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(RecipeShareError):
    """
    Raised when a requested resource does not exist.

    When:    Show, update or delete with an id that has no record.
    HTTP:    404 Not Found

    The record store returns None for a miss; the services convert that None
    into this exception.
    """

    def __init__(
        self,
        resource: str = "Recipe",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found!"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ImageUploadError(RecipeShareError):
    """
    Raised when the image store rejects an upload or the call times out.

    HTTP:    502 Bad Gateway
    Effect:  Create aborts with no record written. Update aborts with nothing
             saved (the old image may already be destroyed at this point).
    """

    def __init__(
        self,
        message: str = "Image upload failed. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ImageDeletionError(RecipeShareError):
    """
    Raised when the image store fails to destroy an image.

    HTTP:    502 Bad Gateway
    Effect:  Delete aborts and the record stays in place. Update aborts before
             any upload is attempted.
    """

    def __init__(
        self,
        message: str = "Image could not be removed. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PersistenceError(RecipeShareError):
    """
    Raised when the record store rejects a read, write or count, or a store
    call exceeds its timeout.

    HTTP:    500 Internal Server Error

    The response always carries a generic message. SQL details stay in the
    server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
