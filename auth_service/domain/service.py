"""Auth service orchestrating password checks, persistence, and token issuance."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Any

from prometheus_client import Counter

from .contracts import AuthResult, LoginInput, NewAccount, RegisterInput
from .errors import AuthenticationError, ConflictError, TokenValidationError, ValidationError
from ..repository import AccountRepository
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenIssuer, parse_bearer

logger = logging.getLogger(__name__)

REGISTRATIONS = Counter(
    "auth_registrations_total", "Registration attempts by outcome.", ["outcome"]
)
LOGINS = Counter("auth_logins_total", "Login attempts by outcome.", ["outcome"])
TOKEN_VALIDATIONS = Counter(
    "auth_token_validations_total", "Bearer token validations by outcome.", ["outcome"]
)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class AuthService:
    """Registration, login, and token validation workflows."""

    def __init__(
        self,
        repository: AccountRepository,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
    ) -> None:
        """Store the collaborators used by every workflow."""
        self._repository = repository
        self._hasher = hasher
        self._tokens = tokens
        # Verified against when the email is unknown so both login failures cost a bcrypt check.
        self._dummy_hash = hasher.hash(secrets.token_urlsafe(16))

    def register(self, payload: RegisterInput) -> AuthResult:
        """Create an account and issue its first token.

        Raises
        ------
        ValidationError
            When the email or password is missing or blank.
        ConflictError
            When the email is already registered.
        """
        if _is_blank(payload.email) or _is_blank(payload.password):
            REGISTRATIONS.labels(outcome="invalid").inc()
            raise ValidationError("Email and password are required")

        password_hash = self._hasher.hash(payload.password)
        try:
            account = self._repository.create_account(
                NewAccount(
                    email=payload.email,
                    password_hash=password_hash,
                    full_name=payload.full_name or "",
                )
            )
        except ConflictError:
            REGISTRATIONS.labels(outcome="conflict").inc()
            logger.info("registration rejected: email already registered")
            raise

        REGISTRATIONS.labels(outcome="created").inc()
        logger.info("account registered account_id=%s", account.account_id)
        issued = self._tokens.issue(account.account_id, account.email, account.full_name)
        return AuthResult(account=account, token=issued.token, expires_in=issued.expires_in)

    def login(self, payload: LoginInput) -> AuthResult:
        """Check credentials, stamp ``last_login_at`` and issue a token.

        Every rejection raises the same :class:`AuthenticationError`.
        """
        if _is_blank(payload.email) or payload.password is None:
            LOGINS.labels(outcome="invalid").inc()
            raise AuthenticationError("invalid credentials")

        account = self._repository.find_by_email(payload.email)
        if account is None:
            self._hasher.verify(payload.password, self._dummy_hash)
            LOGINS.labels(outcome="failure").inc()
            logger.info("login rejected")
            raise AuthenticationError("invalid credentials")
        if not self._hasher.verify(payload.password, account.password_hash):
            LOGINS.labels(outcome="failure").inc()
            logger.info("login rejected")
            raise AuthenticationError("invalid credentials")

        now = datetime.now(timezone.utc)
        self._repository.record_login(account.account_id, now)
        account.last_login_at = now

        LOGINS.labels(outcome="success").inc()
        logger.info("login succeeded account_id=%s", account.account_id)
        issued = self._tokens.issue(account.account_id, account.email, account.full_name)
        return AuthResult(account=account, token=issued.token, expires_in=issued.expires_in)

    def validate(self, authorization: str | None) -> dict[str, Any]:
        """Verify the bearer token in an ``Authorization`` header and return its claims."""
        try:
            claims = self._tokens.validate(parse_bearer(authorization))
        except TokenValidationError as exc:
            TOKEN_VALIDATIONS.labels(outcome=exc.reason).inc()
            logger.info("token rejected reason=%s", exc.reason)
            raise
        TOKEN_VALIDATIONS.labels(outcome="valid").inc()
        return claims
