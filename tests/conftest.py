"""
tests/conftest.py -- Shared test fixtures for the credential service.

This module provides:
  - _make_test_store(): isolated in-memory credential DB
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - api_client: TestClient over a real store with one registered account
  - mock_client: TestClient whose store and hasher are MagicMocks, for driving
    the login/signup state machine into each branch

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG and BCRYPT_ROUNDS must be set before any api/auth/core import so
get_settings() auto-generates ACCESS_KEY and hashing stays fast.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import MagicMock

# CRITICAL: Set before any api/auth/core import so get_settings() can
# auto-generate ACCESS_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.credentials import CredentialRegistrar, CredentialVerifier
from auth.passwords import BcryptHasher
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import Settings, get_settings

TEST_EMAIL = "testuser@example.com"
TEST_PASSWORD = "testpass123"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (the requesting test module's name).
    """
    return UserStore(db_url=f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store, hasher, settings: Settings | None = None):
    """Return an async context manager that replaces the real lifespan.

    Builds the same component graph as api.main.lifespan, but around the
    given store and hasher (real or mocked).
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.user_store = store
        app.state.token_issuer = TokenIssuer(settings.access_key, algorithm=settings.jwt_algorithm)
        app.state.verifier = CredentialVerifier(store, hasher)
        app.state.registrar = CredentialRegistrar(store, hasher)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hasher() -> BcryptHasher:
    """Real bcrypt hasher at the minimum cost factor."""
    return BcryptHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(get_settings().access_key, algorithm=get_settings().jwt_algorithm)


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str], None, None]:
    """Yield (client, user_id) for integration tests against a real store.

    One account (TEST_EMAIL / TEST_PASSWORD) is registered before the client
    starts. Tests that create more accounts should use unique emails -- the
    store is shared for the whole module.
    """
    store = _make_test_store(request.module.__name__.rsplit(".", 1)[-1])
    hasher = BcryptHasher(rounds=4)
    record = CredentialRegistrar(store, hasher).register("Test User", TEST_EMAIL, TEST_PASSWORD)

    app.router.lifespan_context = _patch_lifespan(store, hasher)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, record.id

    store.close()


@pytest.fixture
def mock_client() -> Generator[SimpleNamespace, None, None]:
    """Yield a namespace with client, store, hasher, and issuer.

    store and hasher are MagicMocks; configure return values or side effects
    in the test before making requests. The issuer is real, so returned tokens
    can be compared against issuer.issue(...).
    """
    store = MagicMock()
    hasher = MagicMock()
    settings = get_settings()

    app.router.lifespan_context = _patch_lifespan(store, hasher, settings)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield SimpleNamespace(
            client=client,
            store=store,
            hasher=hasher,
            issuer=TokenIssuer(settings.access_key, algorithm=settings.jwt_algorithm),
        )
