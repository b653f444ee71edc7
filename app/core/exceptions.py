"""
Custom Exceptions

This module defines custom exceptions for better error handling
and more specific error messages.

Endpoints translate these into HTTP status codes:
- ValidationError -> 400
- UnauthorizedError -> 401
- LinkNotFoundError -> 404
- SlugConflictError -> 409
- SlugAllocationError, StoreError -> 500
- StoreInitializationError -> process refuses to start
"""

from typing import List, Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class ValidationError(URLShortenerException):
    """Raised when a shorten request fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(", ".join(errors))


class SlugConflictError(URLShortenerException):
    """Raised when a custom slug is already taken."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__("Slug already exists")


class SlugAllocationError(URLShortenerException):
    """Raised when no free random slug was found within the allowed attempts."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("Failed to generate unique slug")


class LinkNotFoundError(URLShortenerException):
    """Raised when a slug is not present in the link table."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__("Link not found")


class StoreError(URLShortenerException):
    """Raised when the remote document store fails."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Store error: {message}")


class StoreInitializationError(StoreError):
    """Raised when the remote document can be neither found nor created."""
    pass


class UnauthorizedError(URLShortenerException):
    """Raised when the admin key is missing or wrong."""

    def __init__(self):
        super().__init__("Unauthorized")
