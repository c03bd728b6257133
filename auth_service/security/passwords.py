"""Password hashing and verification backed by bcrypt."""

from __future__ import annotations

import bcrypt

# bcrypt only consumes the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted, adaptive password hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12) -> None:
        """Store the bcrypt cost factor applied to every new hash."""
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash ``plaintext`` with a freshly generated salt.

        Two calls with the same input return different strings; both verify
        against the original plaintext.
        """
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(plaintext), salt).decode("utf-8")

    def verify(self, plaintext: str, hash_value: str) -> bool:
        """Return ``True`` iff ``plaintext`` produced ``hash_value``.

        Malformed or empty hashes yield ``False`` instead of raising.
        """
        if not hash_value:
            return False
        try:
            return bcrypt.checkpw(_encode(plaintext), hash_value.encode("utf-8"))
        except (ValueError, TypeError):
            return False


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
