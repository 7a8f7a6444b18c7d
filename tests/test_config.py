"""Unit tests for core/config.py -- Settings validation.

Each test builds Settings directly with _env_file=None so a developer's local
.env file cannot leak in. get_settings() (cached) is left untouched.
"""

import pytest
from pydantic import ValidationError

from core.config import Settings

VALID_KEY = "a" * 32


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DEBUG", "ACCESS_KEY", "JWT_ALGORITHM", "BCRYPT_ROUNDS", "EXPOSE_PASSWORD_HASH", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)


def test_missing_access_key_fails_in_production():
    with pytest.raises(ValidationError, match="ACCESS_KEY is required"):
        Settings(_env_file=None)


def test_debug_generates_access_key(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    settings = Settings(_env_file=None)
    assert len(settings.access_key) == 64


def test_debug_keys_differ_between_instances(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    assert Settings(_env_file=None).access_key != Settings(_env_file=None).access_key


def test_access_key_read_from_environment(monkeypatch):
    monkeypatch.setenv("ACCESS_KEY", VALID_KEY)
    assert Settings(_env_file=None).access_key == VALID_KEY


def test_short_access_key_rejected(monkeypatch):
    monkeypatch.setenv("ACCESS_KEY", "short")
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(_env_file=None)


def test_defaults(monkeypatch):
    monkeypatch.setenv("ACCESS_KEY", VALID_KEY)
    settings = Settings(_env_file=None)
    assert settings.jwt_algorithm == "HS256"
    assert settings.bcrypt_rounds == 10
    assert settings.expose_password_hash is True
    assert settings.database_url.startswith("sqlite:///")


def test_algorithm_normalized(monkeypatch):
    monkeypatch.setenv("ACCESS_KEY", VALID_KEY)
    monkeypatch.setenv("JWT_ALGORITHM", "hs512")
    assert Settings(_env_file=None).jwt_algorithm == "HS512"


def test_asymmetric_algorithm_rejected(monkeypatch):
    monkeypatch.setenv("ACCESS_KEY", VALID_KEY)
    monkeypatch.setenv("JWT_ALGORITHM", "RS256")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize("rounds", ["3", "32"])
def test_bcrypt_rounds_out_of_range(monkeypatch, rounds):
    monkeypatch.setenv("ACCESS_KEY", VALID_KEY)
    monkeypatch.setenv("BCRYPT_ROUNDS", rounds)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_expose_password_hash_can_be_disabled(monkeypatch):
    monkeypatch.setenv("ACCESS_KEY", VALID_KEY)
    monkeypatch.setenv("EXPOSE_PASSWORD_HASH", "false")
    assert Settings(_env_file=None).expose_password_hash is False


def test_cors_origins_from_json(monkeypatch):
    monkeypatch.setenv("ACCESS_KEY", VALID_KEY)
    monkeypatch.setenv("CORS_ORIGINS", '["https://app.example.com"]')
    assert Settings(_env_file=None).cors_origins == ["https://app.example.com"]
