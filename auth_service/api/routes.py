"""HTTP route definitions for the auth service."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..domain.contracts import AuthResult, LoginInput, RegisterInput
from ..domain.errors import AuthenticationError, ConflictError, TokenValidationError, ValidationError
from ..domain.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_BODY_DETAIL = "Invalid request body"


class RegisterRequest(BaseModel):
    """Payload accepted when registering an account."""

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    password: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")


class LoginRequest(BaseModel):
    """Credentials submitted to obtain a bearer token."""

    email: str | None = None
    password: str | None = None


class AuthResponse(BaseModel):
    """Bearer token together with the identity it asserts."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    email: str
    full_name: str = Field(alias="fullName")

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        """Build a response model from a workflow result."""
        return cls(
            token=result.token,
            email=result.account.email,
            full_name=result.account.full_name,
        )


class ValidateResponse(BaseModel):
    """Result of a successful bearer token check."""

    valid: bool = True
    message: str = "Token is valid"
    claims: dict[str, Any]


def get_service(request: Request) -> AuthService:
    """Resolve the `AuthService` stored on the FastAPI application state."""
    service: AuthService = request.app.state.auth_service
    return service


@router.post(
    "/register",
    response_model=AuthResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
def register(
    response: Response,
    payload: RegisterRequest,
    service: AuthService = Depends(get_service),
) -> AuthResponse:
    """Register an account and return its first bearer token."""
    try:
        result = service.register(
            RegisterInput(
                email=payload.email,
                password=payload.password,
                full_name=payload.full_name,
            )
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists") from exc
    response.headers["Location"] = f"/users/{result.account.account_id}"
    return AuthResponse.from_result(result)


@router.post("/login", response_model=AuthResponse, response_model_by_alias=True)
def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_service),
) -> AuthResponse:
    """Exchange email and password for a bearer token."""
    try:
        result = service.login(LoginInput(email=payload.email, password=payload.password))
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return AuthResponse.from_result(result)


@router.get("/validate", response_model=ValidateResponse)
def validate(
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: AuthService = Depends(get_service),
) -> ValidateResponse:
    """Verify the caller's bearer token signature and expiry."""
    try:
        claims = service.validate(authorization)
    except TokenValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"valid": False, "reason": exc.reason},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return ValidateResponse(claims=claims)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer unparseable or mistyped request bodies with 400 instead of 422."""
    # Field errors carry the submitted values, so only their locations are logged.
    logger.info(
        "request body rejected path=%s fields=%s",
        request.url.path,
        [".".join(str(part) for part in error["loc"]) for error in exc.errors()],
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": INVALID_BODY_DETAIL},
    )
