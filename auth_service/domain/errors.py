"""Error taxonomy for the credential and token workflows."""

from __future__ import annotations


class AuthServiceError(Exception):
    """Base class for errors the HTTP layer translates into client responses."""


class ValidationError(AuthServiceError):
    """A required input field is missing or blank."""


class ConflictError(AuthServiceError):
    """An account with the same email already exists."""


class AuthenticationError(AuthServiceError):
    """Credentials were rejected.

    The message never says whether the email or the password was wrong.
    """


class TokenValidationError(AuthServiceError):
    """A bearer token could not be accepted."""

    MISSING = "missing"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"

    def __init__(self, reason: str) -> None:
        super().__init__(f"token rejected: {reason}")
        self.reason = reason
