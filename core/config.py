"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads happen here. No module should call os.getenv()
or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Field names map to env var names
      (e.g. access_key -> ACCESS_KEY). Type coercion and validation are built in.

  @model_validator(mode="after"): Cross-field validation after all fields are
      resolved. The signing key policy lives here so a missing key fails the
      process at startup, never a single request.

Security notes:
  [K1] ACCESS_KEY is the process-wide JWT signing secret. In production mode
       (DEBUG not set or false) a missing key is a hard startup failure. In dev
       mode a random key is generated with a warning.

  [K2] Keys shorter than 32 chars are rejected outright. HS256 signatures are
       only as strong as the key's entropy.

  [K3] bcrypt cost is fixed here at startup. Requests never influence it.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("userauth.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'userauth.db'}"

# HMAC algorithms only -- the same symmetric ACCESS_KEY signs and verifies.
_ALLOWED_ALGORITHMS = {"HS256", "HS384", "HS512"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file (with DEBUG=true). The
    model_validator enforces the signing key policy at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    access_key: str = ""
    jwt_algorithm: str = "HS256"

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    bcrypt_rounds: int = 10
    database_url: str = _DEFAULT_DB_URL
    # Login and signup responses carry the stored record. True keeps the
    # stored hash in that payload for client compatibility; False strips it.
    expose_password_hash: bool = True

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_algorithm(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in _ALLOWED_ALGORITHMS:
            raise ValueError(f"JWT_ALGORITHM must be one of {sorted(_ALLOWED_ALGORITHMS)}, got {value!r}")
        return normalized

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_rounds(cls, value: int) -> int:
        # bcrypt.gensalt() accepts 4..31 -- fail here rather than on first signup.
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return value

    @model_validator(mode="after")
    def validate_access_key(self) -> "Settings":
        """Enforce the ACCESS_KEY policy [K1] [K2].

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive a restart -- acceptable for local dev.

        Production mode: refuse to start without a key.
        """
        if not self.access_key:
            if self.debug:
                self.access_key = secrets.token_hex(32)
                logger.warning("Using auto-generated ACCESS_KEY. Issued tokens will not verify after a restart.")
            else:
                raise ValueError(
                    "ACCESS_KEY is required in production mode. "
                    "Set ACCESS_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.access_key) < 32:
            raise ValueError("ACCESS_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
