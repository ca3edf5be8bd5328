"""Tests for the passphrase gate."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from journal.config import settings
from journal.services.auth import (
    UNLOCK_SUBJECT,
    UnlockSession,
    add_months,
    create_unlock_token,
    decode_unlock_token,
    hash_passphrase,
    verify_passphrase,
)


@pytest.fixture(scope="module")
def passphrase_hash():
    return hash_passphrase("open sesame")


# ---------------------------------------------------------------------------
# 1. Passphrase hashing
# ---------------------------------------------------------------------------

def test_verify_passphrase(passphrase_hash):
    assert verify_passphrase("open sesame", passphrase_hash) is True
    assert verify_passphrase("open sesame!", passphrase_hash) is False


def test_verify_without_configured_hash(monkeypatch):
    monkeypatch.setattr(settings, "gate_passphrase_hash", "")
    assert verify_passphrase("anything") is False


def test_verify_with_malformed_hash():
    assert verify_passphrase("anything", "not-a-bcrypt-hash") is False


# ---------------------------------------------------------------------------
# 2. Expiry arithmetic
# ---------------------------------------------------------------------------

class TestAddMonths:
    def test_simple(self):
        start = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
        assert add_months(start, 1) == datetime(2024, 4, 15, 12, 0, tzinfo=timezone.utc)

    def test_clamps_to_month_end(self):
        start = datetime(2024, 1, 31, tzinfo=timezone.utc)
        assert add_months(start, 1) == datetime(2024, 2, 29, tzinfo=timezone.utc)

    def test_rolls_over_year(self):
        start = datetime(2024, 12, 10, tzinfo=timezone.utc)
        assert add_months(start, 1) == datetime(2025, 1, 10, tzinfo=timezone.utc)


class TestUnlockSession:
    def test_active_until_expiry(self):
        expires = datetime(2030, 1, 1, tzinfo=timezone.utc)
        session = UnlockSession(subject=UNLOCK_SUBJECT, expires_at=expires)
        assert session.is_active(expires - timedelta(seconds=1)) is True
        assert session.is_active(expires) is False


# ---------------------------------------------------------------------------
# 3. Tokens
# ---------------------------------------------------------------------------

class TestTokens:
    def test_round_trip(self):
        now = datetime.now(timezone.utc).replace(microsecond=0)
        token, expire = create_unlock_token(now=now)

        session = decode_unlock_token(token)
        assert session is not None
        assert session.subject == UNLOCK_SUBJECT
        assert session.expires_at == expire
        assert session.is_active()

    def test_expired_token(self):
        token, _ = create_unlock_token(now=datetime(2001, 1, 1, tzinfo=timezone.utc))
        assert decode_unlock_token(token) is None

    def test_wrong_subject(self):
        expire = datetime.now(timezone.utc) + timedelta(days=1)
        token = jwt.encode(
            {"sub": "someone-else", "exp": expire},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        assert decode_unlock_token(token) is None

    def test_wrong_secret(self):
        expire = datetime.now(timezone.utc) + timedelta(days=1)
        token = jwt.encode({"sub": UNLOCK_SUBJECT, "exp": expire}, "other-secret", algorithm="HS256")
        assert decode_unlock_token(token) is None


# ---------------------------------------------------------------------------
# 4. API
# ---------------------------------------------------------------------------

class TestUnlockApi:
    def test_unlock_and_session(self, client, monkeypatch, passphrase_hash):
        monkeypatch.setattr(settings, "gate_passphrase_hash", passphrase_hash)

        response = client.post("/api/auth/unlock", json={"passphrase": "open sesame"})
        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["token_type"] == "bearer"

        session = client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert session.status_code == 200
        assert session.json()["unlocked"] is True

    def test_wrong_passphrase(self, client, monkeypatch, passphrase_hash, caplog):
        monkeypatch.setattr(settings, "gate_passphrase_hash", passphrase_hash)

        response = client.post("/api/auth/unlock", json={"passphrase": "guess"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid passphrase"
        assert "Rejected unlock attempt" in caplog.text

    def test_empty_passphrase_is_422(self, client):
        assert client.post("/api/auth/unlock", json={"passphrase": ""}).status_code == 422

    def test_session_without_token(self, client):
        assert client.get("/api/auth/session").status_code == 401
