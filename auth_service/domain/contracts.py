"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass

from .account import Account


@dataclass(slots=True)
class RegisterInput:
    """Inputs required to register a new account."""

    email: str | None
    password: str | None
    full_name: str | None = None


@dataclass(slots=True)
class LoginInput:
    """Credentials presented at login."""

    email: str | None
    password: str | None


@dataclass(slots=True)
class NewAccount:
    """Row values handed to the repository when inserting an account."""

    email: str
    password_hash: str
    full_name: str


@dataclass(slots=True)
class AuthResult:
    """Outcome of a successful register or login call."""

    account: Account
    token: str
    expires_in: int
