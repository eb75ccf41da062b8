"""
Custom Exceptions

This module defines custom exceptions for better error handling
and more specific error messages.

Validators never raise for bad input (they return ValidationResult);
these exceptions are for the handler and storage layers, and are turned
into JSON responses by the handlers registered in shortbox.main.
"""

from typing import Any, Dict, Optional


class ShortboxException(Exception):
    """Base exception for the link shortener service."""
    pass


class APIError(ShortboxException):
    """
    Raised by endpoints to reject a request.

    Rendered as {"error": message, **extra} with the given status code.
    The message must be safe to show to clients.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.extra = extra or {}
        self.headers = headers or {}
        super().__init__(message)


class DatabaseError(ShortboxException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
