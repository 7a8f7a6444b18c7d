"""
auth/errors.py -- Failure taxonomy for credential operations.

Two outcomes reach callers:
  InvalidCredentials -- unknown email OR wrong password. Merged on purpose so
      a caller cannot tell whether an account exists. Never split it.
  InternalError -- store, hashing, or signing failure. Carries the underlying
      exception's message and chains the original via __cause__.

Routes map these to HTTP 400 and 500 in api/main.py.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for credential operation failures."""


class InvalidCredentials(AuthError):
    message = "Invalid credentials"

    def __init__(self) -> None:
        super().__init__(self.message)


class InternalError(AuthError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @classmethod
    def wrap(cls, exc: BaseException) -> InternalError:
        """Build an InternalError that preserves exc's message.

        Exceptions with an empty str() fall back to the class name so the
        500 body is never blank.
        """
        return cls(str(exc) or type(exc).__name__)
