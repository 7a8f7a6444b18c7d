"""
auth/passwords.py -- bcrypt password hashing.

Uses bcrypt directly rather than passlib[bcrypt]: passlib's wrap-bug detection
feeds bcrypt 4.x+ a password longer than 72 bytes, which it rejects.

The salt generator, hash derivation, and comparison are separate methods so
the registrar can derive a salt first and then hash against it. The cost
factor is fixed when the hasher is built (BCRYPT_ROUNDS) and is never taken
from a request.
"""

from __future__ import annotations

import bcrypt

# bcrypt only reads the first 72 bytes of input. Recent bcrypt releases raise
# instead of truncating, so the limit is checked explicitly.
MAX_PASSWORD_BYTES = 72


class BcryptHasher:
    """Salt generation, hashing, and constant-work comparison."""

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def gen_salt(self) -> bytes:
        return bcrypt.gensalt(rounds=self.rounds)

    def hash(self, plain: str, salt: bytes) -> str:
        """Return the bcrypt hash of plain using salt.

        Raises ValueError if plain is longer than MAX_PASSWORD_BYTES.
        """
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes.")
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def compare(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches the stored bcrypt hash.

        checkpw re-derives the digest with the salt embedded in hashed, so the
        work done does not depend on where the candidate differs. A malformed
        stored hash raises ValueError; callers report that as an internal
        failure rather than a mismatch.
        """
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            # Nothing longer than the limit can have been hashed by hash().
            return False
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
