"""Unit tests for auth/tokens.py -- password hashing and JWT helpers.

Covers:
- bcrypt hash/verify with explicit cost factors
- malformed stored hashes verify as False instead of raising
- access token claims round-trip
- expired, tampered, garbage, and reset-purpose tokens all decode to None
- authenticate_admin() success and both failure paths
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.models import Admin
from auth.tokens import (
    authenticate_admin,
    create_access_token,
    create_reset_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from core.config import get_settings


class TestPasswordHashing:
    @pytest.mark.parametrize("rounds", [10, 12])
    def test_hash_embeds_cost_factor(self, rounds):
        hashed = hash_password("Secret123", rounds=rounds)
        assert hashed.startswith(f"$2b${rounds}$")
        assert verify_password("Secret123", hashed)

    def test_hash_is_salted(self):
        assert hash_password("Secret123") != hash_password("Secret123")

    def test_wrong_password_does_not_verify(self):
        assert verify_password("nope", hash_password("Secret123")) is False

    def test_malformed_hash_returns_false(self):
        assert verify_password("Secret123", "not-a-bcrypt-hash") is False

    def test_hash_rejects_over_72_bytes(self):
        # 40 characters, 80 bytes of UTF-8.
        with pytest.raises(ValueError, match="72 bytes"):
            hash_password("\u00e9" * 40)

    def test_72_bytes_exactly_is_accepted(self):
        plain = "\u00e9" * 36
        assert verify_password(plain, hash_password(plain, rounds=4))

    def test_over_long_password_is_not_reported_as_malformed_hash(self, caplog):
        hashed = hash_password("Secret123", rounds=4)
        with caplog.at_level(logging.WARNING, logger="portfolio.auth"):
            assert verify_password("\u00e9" * 40, hashed) is False
        assert "malformed" not in caplog.text


class TestAccessTokens:
    def test_claims_round_trip(self):
        token = create_access_token(7, "admin", "admin", expire_seconds=60)
        payload = decode_access_token(token)
        assert payload is not None
        assert payload["id"] == 7
        assert payload["sub"] == "admin"
        assert payload["role"] == "admin"
        assert payload["typ"] == "access"

    def test_default_lifetime_follows_transport(self):
        token = create_access_token(1, "admin", "admin")
        payload = decode_access_token(token)
        assert payload["exp"] - payload["iat"] == get_settings().session_ttl_seconds

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "admin", "id": 1, "role": "admin", "typ": "access", "iat": past, "exp": past + timedelta(hours=1)},
            get_settings().secret_key,
            algorithm="HS256",
        )
        assert decode_access_token(token) is None

    def test_tampered_token_rejected(self):
        token = create_access_token(1, "admin", "admin", expire_seconds=60)
        head, body, sig = token.split(".")
        forged_sig = ("A" if sig[0] != "A" else "B") + sig[1:]
        assert decode_access_token(f"{head}.{body}.{forged_sig}") is None

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode({"sub": "admin", "id": 1, "role": "admin", "typ": "access"}, "x" * 40, algorithm="HS256")
        assert decode_access_token(token) is None

    def test_garbage_rejected(self):
        assert decode_access_token("not.a.jwt") is None
        assert decode_access_token("") is None

    def test_reset_token_is_not_a_session(self):
        token = create_reset_token("owner@example.com")
        assert decode_access_token(token) is None
        payload = jwt.decode(token, get_settings().secret_key, algorithms=["HS256"])
        assert payload["email"] == "owner@example.com"
        assert payload["typ"] == "password_reset"
        assert "id" not in payload
        assert payload["exp"] - payload["iat"] == 15 * 60


class TestAuthenticateAdmin:
    def test_success(self, admin_store):
        admin_store.create_admin(Admin(username="admin", password_hash=hash_password("Secret123")))
        admin = authenticate_admin(admin_store, "admin", "Secret123")
        assert admin is not None
        assert admin.username == "admin"

    def test_wrong_password(self, admin_store):
        admin_store.create_admin(Admin(username="admin", password_hash=hash_password("Secret123")))
        assert authenticate_admin(admin_store, "admin", "Secret124") is None

    def test_unknown_username_still_runs_bcrypt(self, admin_store, monkeypatch):
        calls = []
        import auth.tokens as tokens

        real_verify = tokens.verify_password
        monkeypatch.setattr(tokens, "verify_password", lambda p, h: calls.append(h) or real_verify(p, h))
        assert authenticate_admin(admin_store, "ghost", "whatever") is None
        assert calls == [tokens._DUMMY_HASH]
