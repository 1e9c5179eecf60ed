"""
Tourify Backend — Exception Hierarchy
======================================

What:  Application exceptions raised by services and dependencies.
How:   Each exception carries a user-facing message and a context dict.
       Global handlers in main.py translate them into JSON error responses.

Exception Hierarchy:
    TourifyError (base)                 → 500
    ├── ValidationError                 → 400 Bad Request
    ├── AuthenticationError             → 401 Unauthorized
    ├── ForbiddenError                  → 403 Forbidden
    ├── NotFoundError                   → 404 Not Found
    ├── ConflictError                   → 409 Conflict (reserved)
    ├── RateLimitExceededError          → 429 Too Many Requests
    ├── DatabaseError                   → 500 Internal Server Error
    └── ServiceUnavailableError         → 503 Service Unavailable

Visibility rule:
    The public fetch path raises NotFoundError for "unpublished" exactly as it
    does for "does not exist"; the message only ever names the requested id.
"""

from typing import Any, Dict, Optional


class TourifyError(Exception):
    """
    Base exception for all Tourify application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info; returned as `details` only by handlers
                  that opt in (validation, rate limit)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TourifyError):
    """
    Client input violates a business rule.

    Examples: missing tour title, status outside {draft, published, private},
    empty annotation text, unsupported media kind.
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


class AuthenticationError(TourifyError):
    """Missing, malformed, expired or unverifiable bearer token."""

    def __init__(
        self,
        message: str = "Missing or invalid authorization header",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(TourifyError):
    """
    The requester is authenticated but not allowed to act on the resource.

    Raised by owner-scoped tour operations when requester != owner, and by the
    shared-link path when the share password is missing or wrong.
    """

    def __init__(
        self,
        message: str = "Forbidden: you do not own this tour.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TourifyError):
    """A tour, step, annotation or share link does not exist (or is not visible)."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(TourifyError):
    """Reserved for optimistic-concurrency checks. Nothing raises it today."""

    def __init__(
        self,
        message: str = "The resource was modified by another request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(TourifyError):
    """A client exceeded the per-IP request budget."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(TourifyError):
    """
    A query or flush failed.

    The client always receives a generic message; the context (operation,
    original exception type) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServiceUnavailableError(TourifyError):
    """A required collaborator (identity provider, media storage) is not configured."""

    def __init__(
        self,
        message: str = "The service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
