"""
auth/credentials.py -- Credential verification and registration.

CredentialVerifier.verify() and CredentialRegistrar.register() are the only
places that combine the store with the password hasher. Routes and the CLI
call them; neither inlines find_by_email() + compare().

Security:
  [C1] Timing equalization. verify() runs a bcrypt comparison even when the
       email is unknown (against a dummy hash built at construction), so
       response time does not reveal whether an account exists.

  [C2] Unknown email and wrong password raise the same InvalidCredentials.

  [C3] Plaintext passwords are never logged, stored, or attached to errors.

  [C4] Successful calls return the full record, password hash included. The
       HTTP layer decides whether the hash is serialized (EXPOSE_PASSWORD_HASH).

Collaborators are injected so tests can substitute mocks:
  store  -- find_by_email(email), insert(record)
  hasher -- gen_salt(), hash(plain, salt), compare(plain, hashed)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from auth.errors import InternalError, InvalidCredentials
from auth.models import CredentialRecord

if TYPE_CHECKING:
    from auth.passwords import BcryptHasher
    from auth.store import UserStore

logger = logging.getLogger("userauth.auth")

_DUMMY_PASSWORD = "userauth_timing_dummy"


class CredentialVerifier:
    """Check an email/password pair against the stored record."""

    def __init__(self, store: UserStore, hasher: BcryptHasher) -> None:
        self._store = store
        self._hasher = hasher
        # Built once so the first unknown-email login is not slower than the rest [C1].
        self._dummy_hash = hasher.hash(_DUMMY_PASSWORD, hasher.gen_salt())

    def verify(self, email: str, password: str) -> CredentialRecord:
        """Return the stored record when password matches.

        Raises:
            InvalidCredentials: no record for email, or password mismatch.
            InternalError: the store lookup or the hash comparison failed.
        """
        try:
            record = self._store.find_by_email(email)
        except Exception as exc:
            logger.error("Credential lookup failed: %s", exc)
            raise InternalError.wrap(exc) from exc

        if record is None:
            # Equalize timing -- do NOT return before running bcrypt [C1]
            self._compare(password, self._dummy_hash)
            logger.info("Login rejected")
            raise InvalidCredentials()

        if not self._compare(password, record.password_hash):
            logger.info("Login rejected")
            raise InvalidCredentials()

        logger.info("Login accepted for %s", record.id)
        return record

    def _compare(self, password: str, hashed: str) -> bool:
        try:
            return self._hasher.compare(password, hashed)
        except Exception as exc:
            logger.error("Password comparison failed: %s", exc)
            raise InternalError.wrap(exc) from exc


class CredentialRegistrar:
    """Hash a new account's password and persist the record."""

    def __init__(self, store: UserStore, hasher: BcryptHasher) -> None:
        self._store = store
        self._hasher = hasher

    def register(self, name: str, email: str, password: str) -> CredentialRecord:
        """Create and return a new credential record.

        No existing-email check is made; duplicates are possible (see
        auth/store.py).

        Raises:
            InternalError: salt generation, hashing, or the insert failed.
        """
        try:
            salt = self._hasher.gen_salt()
            password_hash = self._hasher.hash(password, salt)
        except Exception as exc:
            logger.error("Password hashing failed: %s", exc)
            raise InternalError.wrap(exc) from exc

        try:
            return self._store.insert(CredentialRecord(name=name, email=email, password_hash=password_hash))
        except Exception as exc:
            logger.error("Credential insert failed: %s", exc)
            raise InternalError.wrap(exc) from exc
