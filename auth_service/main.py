"""FastAPI application wiring for the auth service."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.routes import request_validation_error_handler, router as auth_router
from .config import get_settings
from .domain.service import AuthService
from .repository import AccountRepository
from .security.passwords import PasswordHasher
from .security.tokens import TokenIssuer

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, schema, services) for the app lifecycle."""
    pool = ConnectionPool(settings.database_url, open=False)
    try:
        pool.open()
        app.state.pool = pool
        repository = AccountRepository(pool)
        repository.ensure_schema()
        app.state.auth_service = AuthService(
            repository,
            PasswordHasher(rounds=settings.bcrypt_rounds),
            TokenIssuer.from_settings(settings),
        )
        logger.info("%s %s ready", settings.app_name, settings.version)
        yield
    finally:
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)


@app.get("/", tags=["meta"])
def root() -> dict[str, str]:
    """Return static service metadata."""
    return {"service": settings.app_name, "version": settings.version, "status": "running"}


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(auth_router)
