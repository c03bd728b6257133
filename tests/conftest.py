from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
import uuid

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from auth_service.api import routes
from auth_service.domain.account import Account
from auth_service.domain.contracts import NewAccount
from auth_service.domain.errors import ConflictError
from auth_service.domain.service import AuthService
from auth_service.security.passwords import PasswordHasher
from auth_service.security.tokens import TokenIssuer

TEST_SECRET = "test-secret"
TEST_ISSUER = "auth-service-test"
TEST_AUDIENCE = "auth-service-test-clients"


class FakeRepository:
    """In-memory repository mimicking the Postgres unique email constraint."""

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._lock = Lock()
        self.login_updates: list[tuple[str, datetime]] = []

    def create_account(self, payload: NewAccount) -> Account:
        with self._lock:
            if any(account.email == payload.email for account in self._accounts.values()):
                raise ConflictError("account already exists")
            account = Account(
                account_id=str(uuid.uuid4()),
                email=payload.email,
                password_hash=payload.password_hash,
                full_name=payload.full_name,
                created_at=datetime.now(timezone.utc),
            )
            self._accounts[account.account_id] = account
        return replace(account)

    def find_by_email(self, email: str):
        with self._lock:
            for account in self._accounts.values():
                if account.email == email:
                    return replace(account)
        return None

    def record_login(self, account_id: str, logged_in_at: datetime) -> None:
        with self._lock:
            self._accounts[account_id].last_login_at = logged_in_at
            self.login_updates.append((account_id, logged_in_at))


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(
        secret=TEST_SECRET,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
        ttl_seconds=300,
    )


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def service(repository, token_issuer) -> AuthService:
    return AuthService(repository, PasswordHasher(rounds=4), token_issuer)


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    app.add_exception_handler(RequestValidationError, routes.request_validation_error_handler)
    app.state.auth_service = service

    with TestClient(app) as client:
        yield client, service
