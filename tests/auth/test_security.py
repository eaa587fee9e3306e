"""Tests for password hashing and access tokens."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import JWTError, jwt

from planetnine.auth.security import (
    create_access_token,
    decode_access_token,
    generate_temporary_password,
    hash_password,
    verify_password,
)
from planetnine.config.settings import get_settings


class TestPasswordHashing:
    def test_hash_is_argon2id(self) -> None:
        hashed = hash_password("orbital-resonance")
        assert hashed.startswith("$argon2id$")
        assert hashed != hash_password("orbital-resonance")

    def test_verify(self) -> None:
        hashed = hash_password("orbital-resonance")
        assert verify_password("orbital-resonance", hashed) is True
        assert verify_password("wrong", hashed) is False
        assert verify_password("", hashed) is False

    def test_temporary_passwords_are_unique(self) -> None:
        passwords = {generate_temporary_password() for _ in range(20)}
        assert len(passwords) == 20
        assert all(len(p) >= 16 for p in passwords)


class TestAccessToken:
    def test_roundtrip(self) -> None:
        user_id = str(uuid4())
        token = create_access_token(
            {"sub": user_id, "email": "ada@planetnine.io", "role": "TUTOR"}
        )

        payload = decode_access_token(token)

        assert payload["sub"] == user_id
        assert payload["role"] == "TUTOR"
        assert payload["type"] == "access"

    def test_expired(self) -> None:
        token = create_access_token({"sub": "x"}, timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_wrong_type(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {"sub": "x", "type": "refresh"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_tampered(self) -> None:
        token = create_access_token({"sub": "x"})
        with pytest.raises(JWTError):
            decode_access_token(token.rsplit(".", 1)[0] + ".bm90LWEtc2lnbmF0dXJl")
