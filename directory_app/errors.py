"""
Domain exceptions for the tool directory.

Services raise these; main.py maps each one to an HTTP status and a
standard ErrorResponse body.
"""

from typing import Optional


class DirectoryError(Exception):
    """Base class for all expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class AuthorizationError(DirectoryError):
    """Actor lacks the capability required for the operation."""

    status_code = 403

    def __init__(self, message: str, authenticated: bool = True):
        super().__init__(message)
        self.authenticated = authenticated
        if not authenticated:
            self.status_code = 401


class ValidationError(DirectoryError):
    """Malformed input, rejected before any write."""

    status_code = 422

    def __init__(self, field: str, message: str):
        super().__init__(message, detail=f"Invalid value for '{field}'")
        self.field = field


class NotFoundError(DirectoryError):
    status_code = 404


class ReferentialConflictError(DirectoryError):
    """Category still referenced by tools; deletion needs confirmation."""

    status_code = 409

    def __init__(self, category_id: str, dependent_tools: int):
        super().__init__(
            f"Category has {dependent_tools} tool(s); confirm to move them to uncategorized",
            detail=f"category_id={category_id}",
        )
        self.category_id = category_id
        self.dependent_tools = dependent_tools


class TransientStoreError(DirectoryError):
    """A data store call failed (connection, session expiry, constraint race)."""

    status_code = 503

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        super().__init__(
            "The data store is temporarily unavailable, please retry",
            detail=f"{operation} failed",
        )
        self.operation = operation
        self.__cause__ = cause
