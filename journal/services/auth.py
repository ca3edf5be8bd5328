"""Passphrase gate: bcrypt verification and expiring unlock tokens.

A single shared passphrase unlocks mutation endpoints for a fixed window.
This stands in for authorization; it is not a security boundary.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone

import bcrypt
from jose import JWTError, jwt

from journal.config import settings

UNLOCK_SUBJECT = "journal-operator"


@dataclass(frozen=True)
class UnlockSession:
    """Proof that the passphrase was presented; valid until ``expires_at``."""
    subject: str
    expires_at: datetime

    def is_active(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at


def hash_passphrase(passphrase: str) -> str:
    pw = passphrase.encode("utf-8")[:72]
    return bcrypt.hashpw(pw, bcrypt.gensalt()).decode("utf-8")


def verify_passphrase(plain: str, hashed: str | None = None) -> bool:
    hashed = settings.gate_passphrase_hash if hashed is None else hashed
    if not hashed:
        return False
    pw = plain.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw, hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in configuration
        return False


def add_months(moment: datetime, months: int) -> datetime:
    """Same wall-clock time ``months`` later, clamped to the month's last day."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def create_unlock_token(now: datetime | None = None) -> tuple[str, datetime]:
    """Issue a JWT valid for ``settings.unlock_months`` calendar months."""
    now = now or datetime.now(timezone.utc)
    expire = add_months(now, settings.unlock_months)
    payload = {"sub": UNLOCK_SUBJECT, "exp": expire}
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, expire


def decode_unlock_token(token: str) -> UnlockSession | None:
    """Decode a token into an UnlockSession. Returns None on failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    exp = payload.get("exp")
    if subject != UNLOCK_SUBJECT or exp is None:
        return None
    return UnlockSession(
        subject=subject,
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
