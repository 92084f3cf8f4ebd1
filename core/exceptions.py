"""
Error kinds raised by the session lifecycle core.

Every error carries the HTTP status the transport layer maps it to, so the
routers never translate errors by hand.
"""

from typing import Optional


class AuthError(Exception):
    """Base class for all credential/session errors."""

    status_code: int = 400
    default_message: str = "Authentication error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    status_code = 401
    default_message = "Could not validate user."


class UserNotFound(InvalidCredentials):
    """Email or id has no credential record.

    Subclasses InvalidCredentials so callers that only care about
    "sign-in failed" can catch one type.
    """
    status_code = 401
    default_message = "User not found."


class EmailAlreadyRegistered(AuthError):
    status_code = 400
    default_message = "Email already registered"


class InvalidToken(AuthError):
    """Token input was empty or not a string."""
    status_code = 400
    default_message = "The token provided is invalid."


class TokenError(InvalidToken):
    """Base for failures decoding a well-formed request's token."""
    status_code = 401
    default_message = "Invalid token"


class MalformedToken(TokenError):
    default_message = "Malformed token"


class InvalidSignature(TokenError):
    default_message = "Token signature verification failed"


class TokenExpired(TokenError):
    default_message = "Token expired"


class AlreadyRevoked(AuthError):
    status_code = 409
    default_message = "This token has already been logged out."


class Unauthenticated(AuthError):
    status_code = 401
    default_message = "Could not validate credentials."


class StoreUnavailable(AuthError):
    """A backing store failed. Never retried by the core."""

    status_code = 503
    default_message = "Backing store unavailable"

    def __init__(self, step: str, message: Optional[str] = None):
        self.step = step
        super().__init__(message or f"{self.default_message} during {step}")


class RecordDecodeError(AuthError):
    """A stored record is missing a required field."""
    status_code = 500
    default_message = "Stored record is malformed"
