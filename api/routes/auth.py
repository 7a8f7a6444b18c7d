"""
api/routes/auth.py -- Login, signup, and current-user endpoints.

Routes:
  POST /login   -- verify email/password; 200 with token in body and headers
  POST /signup  -- create a credential record; 201 with the record
  GET  /me      -- record for the token in the authorization header

Failures are raised, not returned: CredentialVerifier/CredentialRegistrar
raise InvalidCredentials or InternalError, and the exception handlers in
api/main.py turn them into 400 {"msg"} and 500 {"error"}.

Security:
  [C1] CredentialVerifier.verify() carries the timing equalization -- use it,
       never inline find_by_email() + compare().
  [C4] The stored hash is serialized only when EXPOSE_PASSWORD_HASH is true.
  [M5] Cache-Control: no-store on login responses (success and failure).

Handlers are plain `def`: the store and bcrypt block, so FastAPI runs them in
its worker thread pool.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import (
    ErrorResponse,
    InvalidCredentialsResponse,
    LoginRequest,
    LoginResponse,
    SignupRequest,
    UserBody,
    user_body,
)
from auth.credentials import CredentialRegistrar, CredentialVerifier
from auth.dependencies import get_current_user
from auth.models import CredentialRecord
from auth.tokens import TokenIssuer

# Auth policy:
# - POST /login:   public -- login endpoint must be unauthenticated
# - POST /signup:  public -- open self-registration
# - GET  /me:      requires a valid token (get_current_user)
router = APIRouter()


def _expose_hash(request: Request) -> bool:
    return request.app.state.settings.expose_password_hash


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": InvalidCredentialsResponse}, 500: {"model": ErrorResponse}},
)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a signed access token.

    The token is returned three ways for client compatibility: the `token`
    body field, the `authorization` header, and alongside `userId` (also in
    the `userid` header).
    """
    verifier: CredentialVerifier = request.app.state.verifier
    issuer: TokenIssuer = request.app.state.token_issuer

    user = verifier.verify(body.email, body.password)
    token = issuer.issue(user.id)

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=token,
            user=user_body(user, _expose_hash(request)),
            user_id=user.id,
        ).model_dump(by_alias=True, exclude_none=True),
    )
    resp.headers["authorization"] = token
    resp.headers["userid"] = user.id
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post(
    "/signup",
    response_model=UserBody,
    status_code=201,
    responses={500: {"model": ErrorResponse}},
)
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Register a new account and return the created record.

    No duplicate-email check -- a second signup with the same email creates a
    second record.
    """
    registrar: CredentialRegistrar = request.app.state.registrar
    record = registrar.register(body.name, body.email, body.password)
    return JSONResponse(
        status_code=201,
        content=user_body(record, _expose_hash(request)).model_dump(by_alias=True, exclude_none=True),
    )


@router.get("/me", response_model=UserBody, responses={401: {"model": ErrorResponse}})
def me(request: Request, current_user: CredentialRecord = Depends(get_current_user)) -> JSONResponse:
    """Return the record the presented token belongs to."""
    return JSONResponse(
        content=user_body(current_user, _expose_hash(request)).model_dump(by_alias=True, exclude_none=True),
    )
