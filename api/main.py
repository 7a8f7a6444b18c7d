"""
api/main.py -- FastAPI application entry point for the credential service.

Run with:  uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- allowed browser origins; exposes the authorization and
                        userid response headers so browser clients can read them
  2. log_requests    -- one access-log line per request

Lifespan builds the long-lived collaborators once (settings, store, hasher,
token issuer, verifier, registrar) and closes the store on shutdown. Routes
read them from app.state; tests swap them by replacing the lifespan.

Exception handlers map the credential failure taxonomy to the HTTP contract:
  InvalidCredentials -> 400 {"msg": "Invalid credentials"}
  InternalError      -> 500 {"error": <underlying message>}
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models import ErrorResponse, HealthResponse, InvalidCredentialsResponse
from api.routes.auth import router as auth_router
from auth.credentials import CredentialRegistrar, CredentialVerifier
from auth.errors import InternalError, InvalidCredentials
from auth.passwords import BcryptHasher
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import get_settings

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("userauth.api")

# Settings are resolved at import so a missing ACCESS_KEY stops the process
# before it accepts connections.
_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the credential components on startup; close the store on shutdown.

    Startup order matters: the store and hasher first, since the verifier
    hashes its timing-equalization dummy on construction.
    """
    logger.info("Credential service starting up")
    app.state.settings = _settings
    app.state.user_store = UserStore(db_url=_settings.database_url)
    hasher = BcryptHasher(rounds=_settings.bcrypt_rounds)
    app.state.token_issuer = TokenIssuer(_settings.access_key, algorithm=_settings.jwt_algorithm)
    app.state.verifier = CredentialVerifier(app.state.user_store, hasher)
    app.state.registrar = CredentialRegistrar(app.state.user_store, hasher)
    logger.info("Credential components initialized (bcrypt rounds=%d)", _settings.bcrypt_rounds)

    yield

    app.state.user_store.close()
    logger.info("Credential service shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Credential Service",
    description="Email/password login with signed access tokens, and account signup.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["authorization", "userid"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Logs method, path, status, and latency. Bodies are never logged -- they
# carry plaintext passwords.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(InvalidCredentials)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentials) -> JSONResponse:
    """Return 400 with the generic message. Unknown email and wrong password look identical."""
    response = JSONResponse(status_code=400, content=InvalidCredentialsResponse().model_dump())
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(InternalError)
async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
    """Return 500 with the underlying failure message.

    Security note: the message comes from the store, bcrypt, or the signer and
    is sent to the client verbatim, as existing clients expect. Driver messages
    can describe internals: a SQLAlchemy error string ends with its
    "[SQL: ...] [parameters: (...)]" block, so a failed signup INSERT returns
    the submitted name, email and the freshly computed bcrypt hash in the 500
    body. Never the plaintext password, which is not a statement parameter.
    """
    logger.error("Request failed on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=exc.message).model_dump(exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 when the request body fails validation.

    Input values are stripped from the detail -- they may include a password.
    """
    errors = [{"loc": e.get("loc"), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="Request validation failed.", detail=str(errors)).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return {"error": detail} for FastAPI/Starlette HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    Unlike InternalError, the raw exception is written to the log only, never
    to the response body. This departs from the previous service,
    which answered every unexpected exception with {"error": <its message>}.
    /login and /signup route all collaborator failures through InternalError,
    so their bodies are unaffected; only failures outside the credential
    components land here.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="An unexpected error occurred.").model_dump(exclude_none=True),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version, and database reachability."""
    database = "ok" if request.app.state.user_store.ping() else "error"
    return HealthResponse(version=__version__, components={"app": "ok", "database": database})
