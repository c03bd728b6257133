from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Account:
    """Aggregate root for a registered user's identity and credential."""

    account_id: str
    email: str
    password_hash: str
    full_name: str
    created_at: datetime
    last_login_at: datetime | None = None
    # Set at creation; no workflow reads or changes it yet.
    is_active: bool = True
