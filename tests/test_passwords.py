"""Unit tests for auth/passwords.py -- BcryptHasher."""

import bcrypt
import pytest

from auth.passwords import MAX_PASSWORD_BYTES, BcryptHasher


def test_gen_salt_uses_configured_cost():
    assert BcryptHasher(rounds=5).gen_salt().startswith(b"$2b$05$")


def test_hash_embeds_salt_and_is_not_plaintext(hasher):
    salt = hasher.gen_salt()
    hashed = hasher.hash("1234", salt)
    assert hashed != "1234"
    assert hashed.startswith(salt.decode("utf-8"))


def test_compare_accepts_correct_password(hasher):
    hashed = hasher.hash("correct horse", hasher.gen_salt())
    assert hasher.compare("correct horse", hashed) is True


def test_compare_rejects_wrong_password(hasher):
    hashed = hasher.hash("correct horse", hasher.gen_salt())
    assert hasher.compare("correct hors", hashed) is False
    assert hasher.compare("Correct horse", hashed) is False


def test_compare_accepts_hash_from_other_bcrypt_producers(hasher):
    """Hashes written by any bcrypt implementation verify, whatever their cost."""
    hashed = bcrypt.hashpw(b"1234", bcrypt.gensalt(rounds=6)).decode("utf-8")
    assert hasher.compare("1234", hashed) is True


def test_unicode_password(hasher):
    hashed = hasher.hash("pässwörd", hasher.gen_salt())
    assert hasher.compare("pässwörd", hashed) is True
    assert hasher.compare("passwort", hashed) is False


def test_hash_rejects_password_over_limit(hasher):
    with pytest.raises(ValueError):
        hasher.hash("x" * (MAX_PASSWORD_BYTES + 1), hasher.gen_salt())


def test_limit_counts_bytes_not_characters(hasher):
    # 37 two-byte characters = 74 bytes
    with pytest.raises(ValueError):
        hasher.hash("é" * 37, hasher.gen_salt())


def test_password_at_limit_round_trips(hasher):
    password = "x" * MAX_PASSWORD_BYTES
    assert hasher.compare(password, hasher.hash(password, hasher.gen_salt())) is True


def test_compare_over_limit_never_matches(hasher):
    hashed = hasher.hash("x" * MAX_PASSWORD_BYTES, hasher.gen_salt())
    assert hasher.compare("x" * (MAX_PASSWORD_BYTES + 1), hashed) is False


def test_compare_malformed_hash_raises(hasher):
    with pytest.raises(ValueError):
        hasher.compare("1234", "not-a-bcrypt-hash")
