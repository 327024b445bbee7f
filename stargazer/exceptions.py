"""
Stargazer Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the error cases the API signals.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) translate them into
       structured JSON error responses with the matching HTTP status code.
Who:   Raised by the database layer and StarService; caught by global handlers.

Exception Hierarchy:
    StargazerError (base)   → 500 Internal Server Error
    ├── ValidationError     → 400 Bad Request
    ├── NotFoundError       → 404 Not Found
    ├── ConflictError       → 409 Conflict
    └── DatabaseError       → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class StargazerError(Exception):
    """
    Base exception for all Stargazer application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StargazerError):
    """
    Raised when client input fails a business rule.

    When:    A star is created with a blank name.
    HTTP:    400 Bad Request

    Schema-level problems (a missing form field) are reported by FastAPI
    itself with 422.
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


class NotFoundError(StargazerError):
    """
    Raised when a requested resource does not exist.

    When:    GET, PUT or DELETE /stars/{name} with a name that matches no row.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; StarService converts that
    into this exception instead of answering with an empty object.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(StargazerError):
    """
    Raised when a write would break a uniqueness constraint.

    When:    Creating a star whose name already exists, or renaming a star
             onto a name another star holds.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"A {resource} with that identifier already exists"
        if resource_id:
            message = f"{resource} '{resource_id}' already exists"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(StargazerError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection cannot be opened at startup, a query fails mid-request.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Detailed error
        info (SQL, constraint names, file paths) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
