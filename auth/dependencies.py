"""
auth/dependencies.py -- FastAPI Depends() helpers for token-authenticated routes.

POST /login returns the token in the `authorization` response header with no
scheme prefix, and clients echo it back the same way. The conventional
`Authorization: Bearer <token>` form is accepted too.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: auth/dependencies.py may import from fastapi (Request,
HTTPException) because it is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import CredentialRecord


def _extract_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "").strip()
    if not header:
        return None
    if header[:7].lower() == "bearer ":
        return header[7:].strip() or None
    return header


def try_get_current_user(request: Request) -> CredentialRecord | None:
    """Authenticate the request from its authorization header.

    Returns the stored record on success, None on any failure.
    """
    token = _extract_token(request)
    if token is None:
        return None
    identity_ref = request.app.state.token_issuer.decode(token)
    if identity_ref is None:
        return None
    return request.app.state.user_store.get_by_id(identity_ref)


def get_current_user(request: Request) -> CredentialRecord:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: CredentialRecord = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required.")
    return user
