from __future__ import annotations

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from auth_service import main
from auth_service.domain.service import AuthService
from auth_service.main import app
from auth_service.repository import AccountRepository


class RecordingPool:
    """Stand-in for ``ConnectionPool`` that only tracks open/close calls."""

    instances: list["RecordingPool"] = []

    def __init__(self, conninfo, open=True):
        self.conninfo = conninfo
        self.opened = False
        self.closed = False
        RecordingPool.instances.append(self)

    def open(self):
        self.opened = True

    def close(self):
        self.closed = True


@pytest.fixture
def recording_pool(monkeypatch):
    RecordingPool.instances = []
    monkeypatch.setattr(main, "ConnectionPool", RecordingPool)
    return RecordingPool


def _run_lifespan(target: FastAPI) -> None:
    async def run():
        async with main.lifespan(target):
            pass

    asyncio.run(run())


def test_root_returns_service_metadata():
    # No context manager: the lifespan hook, and with it Postgres, is not started.
    client = TestClient(app)
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"service": "auth-service", "version": "1.0.0", "status": "running"}


def test_healthz():
    client = TestClient(app)
    assert client.get("/healthz").json() == {"status": "ok"}


def test_metrics_counts_login_outcomes(service, monkeypatch):
    monkeypatch.setattr(app.state, "auth_service", service, raising=False)
    client = TestClient(app)

    rejected = client.post("/auth/login", json={"email": "nobody@x.com", "password": "wrong"})
    assert rejected.status_code == 401

    response = client.get("/metrics")
    assert response.status_code == 200
    samples = {
        line.rsplit(" ", 1)[0]: float(line.rsplit(" ", 1)[1])
        for line in response.text.splitlines()
        if line and not line.startswith("#")
    }
    assert samples['auth_logins_total{outcome="failure"}'] >= 1.0


def test_cors_allows_any_origin_by_default():
    client = TestClient(app)
    response = client.get("/healthz", headers={"Origin": "https://example.com"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_lifespan_wires_service_and_closes_pool(recording_pool, monkeypatch):
    monkeypatch.setattr(AccountRepository, "ensure_schema", lambda self: None)
    target = FastAPI()

    _run_lifespan(target)

    (pool,) = recording_pool.instances
    assert pool.opened
    assert pool.closed
    assert isinstance(target.state.auth_service, AuthService)


def test_lifespan_closes_pool_when_schema_setup_fails(recording_pool, monkeypatch):
    def fail(self):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(AccountRepository, "ensure_schema", fail)

    with pytest.raises(RuntimeError, match="database unavailable"):
        _run_lifespan(FastAPI())

    (pool,) = recording_pool.instances
    assert pool.closed
