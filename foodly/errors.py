"""
Error taxonomy for the Foodly client.

Transport problems and HTTP error responses are kept apart:
- NetworkError: the request never produced a response (timeout, DNS, refused connection)
- ApiError: the backend answered with an error status; carries status_code and the
  server-provided message

SessionStore and BookmarkSync raise these to their callers. The recipe caches catch
them, log a diagnostic and clear their cache marker instead.
"""

from typing import Optional


class FoodlyError(Exception):
    """Base class for every error raised by the Foodly client."""


class NetworkError(FoodlyError):
    """Raised when the backend could not be reached."""


class ApiError(FoodlyError):
    """
    Raised when the backend returned an error response.

    Attributes:
        status_code: HTTP status of the response (None when the body was malformed)
        message: Server-provided message, verbatim
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(ApiError):
    """Invalid credentials or a missing/refused bearer token."""


class StaleTokenError(AuthError):
    """A persisted token was refused by the profile check (expired or revoked)."""


class ValidationError(ApiError):
    """The backend rejected submitted data (e.g. a duplicate username on register)."""


class NotFoundError(ApiError):
    """The requested recipe does not exist."""


class FetchError(ApiError):
    """Any other unsuccessful response, or a response body that could not be parsed."""
