"""
Custom Exceptions

This module defines the error taxonomy of the shortener:

- InvalidURLError: destination rejected by validation (client error)
- InvalidCodeError: malformed short code (client error, never retried)
- ShortCodeNotFoundError: well-formed code with no record (client error)
- PersistenceError: storage failure (server error on create/lookup,
  logged only when it happens while recording a click)
"""

from typing import Optional


class ShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class InvalidURLError(ShortenerException):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidCodeError(ShortenerException):
    """Raised when a short code is empty or contains non-base62 characters."""

    def __init__(self, short_code: Optional[str], reason: str = "Invalid short code"):
        self.short_code = short_code
        self.reason = reason
        super().__init__(f"{reason}: {short_code!r}")


class ShortCodeNotFoundError(ShortenerException):
    """Raised when a short code is not found in the database."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class PersistenceError(ShortenerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
