"""
auth/tokens.py -- Access token signing and verification.

Security design decisions:
  JWT: python-jose, HS256 by default. The payload is exactly {"id": <identity
       reference>} -- no exp, aud, or iss claims, so tokens stay valid until
       the signing key changes. HS256 is deterministic: the same identity
       signed with the same key yields the same token.

  Key: passed to the TokenIssuer constructor. The app lifespan hands it
       settings.access_key, which Settings validates at startup, so a missing
       key fails construction and never surfaces at request time.

  Verification returns None on any failure -- the dependency layer turns that
       into a 401.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

from jose import jwt
from jose.exceptions import JOSEError

from auth.errors import InternalError

logger = logging.getLogger("userauth.auth.tokens")

_CLAIM = "id"


class TokenIssuer:
    """Mint and verify bearer tokens that embed an identity reference.

    Usage:
        issuer = TokenIssuer(settings.access_key)
        token = issuer.issue(record.id)
        issuer.decode(token)  # -> record.id
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256") -> None:
        if not secret_key:
            raise ValueError("TokenIssuer requires a signing key.")
        self._secret_key = secret_key
        self.algorithm = algorithm

    def issue(self, identity_ref: str) -> str:
        """Sign {"id": identity_ref} and return the compact JWT string.

        Raises InternalError if signing fails.
        """
        try:
            return jwt.encode({_CLAIM: identity_ref}, self._secret_key, algorithm=self.algorithm)
        except (JOSEError, TypeError, ValueError) as exc:
            logger.error("Token signing failed: %s", exc)
            raise InternalError.wrap(exc) from exc

    def decode(self, token: str) -> str | None:
        """Verify token and return the embedded identity reference, or None.

        Tokens carry no exp claim; python-jose only checks exp when present.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except JOSEError:
            return None
        identity_ref = payload.get(_CLAIM)
        if not isinstance(identity_ref, str) or not identity_ref:
            return None
        return identity_ref
