from __future__ import annotations

from typing import Dict, Optional


class ApiError(Exception):
    """
    Base class for errors that map onto an HTTP status and a `{"error": message}` body.

    Subclasses set `status_code` and `default_message`; callers may override the
    message per raise site.
    """

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> None:
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(ApiError):
    """A required input field is missing or malformed."""

    status_code = 400
    default_message = "Title is required"


class InvalidIdentifier(ApiError):
    """The id is not well-formed for the store."""

    status_code = 400
    default_message = "Invalid todo ID"


class UsernameTaken(ApiError):
    status_code = 400
    default_message = "Username already exists"


class NotFound(ApiError):
    """No record matches the (id, owner) pair."""

    status_code = 404
    default_message = "Todo not found"


class InternalError(ApiError):
    """Unexpected store or infrastructure failure."""

    status_code = 500
    default_message = "Server error"


class AuthenticationError(ApiError):
    """Base class for the 401 family."""

    status_code = 401
    default_message = "Unauthorized"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message, {"WWW-Authenticate": "Bearer"} if headers is None else headers)


class Unauthorized(AuthenticationError):
    default_message = "Unauthorized"


class NoCredential(AuthenticationError):
    default_message = "No token provided, authorization denied"


class InvalidCredential(AuthenticationError):
    default_message = "Invalid token"


class ExpiredCredential(AuthenticationError):
    default_message = "Token expired"


class UnknownPrincipal(AuthenticationError):
    default_message = "User not found"


class InvalidLogin(AuthenticationError):
    default_message = "Invalid credentials"
