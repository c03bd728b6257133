"""Utilities for issuing and validating application JWTs."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any
import uuid

import jwt

from ..config import Settings
from ..domain.errors import TokenValidationError

REQUIRED_CLAIMS = ["iss", "aud", "sub", "email", "name", "iat", "exp"]


@dataclass(slots=True, frozen=True)
class IssuedToken:
    """Encoded bearer token plus its lifetime in seconds."""

    token: str
    expires_in: int


class TokenIssuer:
    """Mint and verify self-contained, HMAC-signed bearer tokens."""

    def __init__(
        self,
        *,
        secret: str,
        issuer: str,
        audience: str,
        ttl_seconds: int,
        algorithm: str = "HS256",
    ) -> None:
        """Store the signing key and claim policy used for every token."""
        if not secret:
            raise ValueError("token signing secret must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("token ttl must be positive")
        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._ttl_seconds = ttl_seconds
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        """Build an issuer from the process configuration."""
        return cls(
            secret=settings.jwt_secret,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            ttl_seconds=settings.jwt_ttl_seconds,
        )

    def issue(self, account_id: str, email: str, full_name: str) -> IssuedToken:
        """Create a signed JWT asserting the caller's identity.

        Parameters
        ----------
        account_id:
            Account identifier embedded in the ``sub`` claim.
        email:
            Account email embedded in the ``email`` claim.
        full_name:
            Display name embedded in the ``name`` claim.

        Returns
        -------
        IssuedToken
            The encoded JWT string and its TTL (in seconds).
        """
        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": account_id,
            "email": email,
            "name": full_name,
            "iat": now,
            "exp": now + self._ttl_seconds,
            "jti": uuid.uuid4().hex,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_in=self._ttl_seconds)

    def validate(self, token: str) -> dict[str, Any]:
        """Decode and verify a JWT returning its claims.

        Raises
        ------
        TokenValidationError
            With ``reason`` set to ``missing``, ``malformed``,
            ``bad_signature`` or ``expired``.
        """
        if not token:
            raise TokenValidationError(TokenValidationError.MISSING)
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenValidationError(TokenValidationError.EXPIRED) from exc
        # InvalidSignatureError subclasses DecodeError, so it is matched first.
        except (
            jwt.InvalidSignatureError,
            jwt.InvalidAlgorithmError,
            jwt.InvalidIssuerError,
            jwt.InvalidAudienceError,
        ) as exc:
            raise TokenValidationError(TokenValidationError.BAD_SIGNATURE) from exc
        except jwt.PyJWTError as exc:
            raise TokenValidationError(TokenValidationError.MALFORMED) from exc


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        raise TokenValidationError(TokenValidationError.MISSING)
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise TokenValidationError(TokenValidationError.MALFORMED)
    return token
