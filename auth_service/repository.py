"""Database repository for account data."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from psycopg import errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .domain.contracts import NewAccount
from .domain.errors import ConflictError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    account_id TEXT PRIMARY KEY,
    email TEXT NOT NULL,
    password_hash TEXT NOT NULL,
    full_name TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    last_login_at TIMESTAMPTZ NULL,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    CONSTRAINT accounts_email_key UNIQUE (email)
)
"""

_ACCOUNT_COLUMNS = (
    "account_id, email, password_hash, full_name, created_at, last_login_at, is_active"
)


class AccountRepository:
    """Postgres-backed account persistence.

    Email uniqueness is enforced by the ``accounts_email_key`` constraint;
    a violation surfaces as :class:`ConflictError`.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the ``accounts`` table when it does not exist yet."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
                conn.commit()
        logger.info("accounts schema ensured")

    def create_account(self, payload: NewAccount) -> Account:
        """Insert an account row and return the stored aggregate."""
        account_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (account_id, email, password_hash, full_name, created_at, is_active)
                        VALUES (%s, %s, %s, %s, %s, %s)
                        RETURNING {_ACCOUNT_COLUMNS}
                        """,
                        (
                            account_id,
                            payload.email,
                            payload.password_hash,
                            payload.full_name,
                            now,
                            True,
                        ),
                    )
                    record = cur.fetchone()
                    conn.commit()
        except errors.UniqueViolation as exc:
            raise ConflictError("account already exists") from exc
        return self._map_record(record)

    def find_by_email(self, email: str) -> Account | None:
        """Return the account registered under exactly ``email`` or ``None``."""
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s",
                    (email,),
                )
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def record_login(self, account_id: str, logged_in_at: datetime) -> None:
        """Persist ``logged_in_at`` as the account's last successful login."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE accounts SET last_login_at = %s WHERE account_id = %s",
                    (logged_in_at, account_id),
                )
                conn.commit()

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            email=row[1],
            password_hash=row[2],
            full_name=row[3],
            created_at=row[4],
            last_login_at=row[5],
            is_active=row[6],
        )
