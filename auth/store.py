"""
auth/store.py -- SQLAlchemy Core persistence layer for credential records.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_record is the mapper.
Credential components and routes never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Known gap, kept on purpose: email is indexed but NOT unique. Registration does
not pre-check it either, so duplicate emails can exist. find_by_email()
returns the oldest matching record (lowest seq) so lookups stay
deterministic.

Identity references: insert() assigns a 24-char random hex id. The integer
seq column is an internal insertion counter and never leaves this module.

DB path: auth/userauth.db unless DATABASE_URL overrides it.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from auth.models import CredentialRecord

logger = logging.getLogger("userauth.store")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'userauth.db'}"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "Users",
    _metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(24), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("email", String(320), nullable=False),
    Column("password", Text, nullable=False),  # bcrypt hash, never plaintext
    # Note: no UNIQUE on email -- see module docstring.
    Index("ix_users_email", "email"),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _is_memory_url(db_url: str) -> bool:
    return db_url == "sqlite://" or ":memory:" in db_url or "mode=memory" in db_url


def _new_identity_ref() -> str:
    return secrets.token_hex(12)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for CredentialRecord entities.

    Usage:
        store = UserStore()
        record = store.insert(CredentialRecord(name="Ada", email="ada@example.com", password_hash=h))
        store.find_by_email("ada@example.com")
        store.close()

    Driver errors (sqlalchemy.exc.SQLAlchemyError) propagate unchanged; the
    credential components translate them into InternalError.
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        engine_kwargs: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            if _is_memory_url(db_url):
                # One connection for the engine's lifetime; an in-memory DB
                # disappears with its last connection.
                engine_kwargs["poolclass"] = StaticPool
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, **engine_kwargs)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def find_by_email(self, email: str) -> CredentialRecord | None:
        """Return the oldest record with this exact email, or None."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _users.select().where(_users.c.email == email).order_by(_users.c.seq).limit(1)
            ).fetchone()
        return _row_to_record(row) if row is not None else None

    def get_by_id(self, identity_ref: str) -> CredentialRecord | None:
        """Look up a record by identity reference. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == identity_ref)).fetchone()
        return _row_to_record(row) if row is not None else None

    def insert(self, record: CredentialRecord) -> CredentialRecord:
        """Persist a new record and return it with its assigned id.

        The input record is not mutated. Single INSERT committed on its own,
        so a failure leaves nothing behind.
        """
        identity_ref = _new_identity_ref()
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=identity_ref,
                    name=record.name,
                    email=record.email,
                    password=record.password_hash,
                )
            )
            conn.commit()
        logger.info("Credential record %s created", identity_ref)
        return CredentialRecord(
            id=identity_ref,
            name=record.name,
            email=record.email,
            password_hash=record.password_hash,
        )

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_record(row) -> CredentialRecord:
    return CredentialRecord(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password,
    )
