"""Password hashing, session JWTs and remember tokens."""
from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from .constants import DEFAULT_REMEMBER_DAYS, DEFAULT_SESSION_DAYS

SESSION_TOKEN_TYPE = "session"


# ─── Password Hashing ─────────────────────────────────────────────────────────

def hash_password(plain: str) -> str:
    return generate_password_hash(plain)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed or plain is None:
        return False
    try:
        return check_password_hash(hashed, plain)
    except ValueError:
        # e.g. placeholder hashes or corrupted values
        return False


# ─── Remember / verification tokens ───────────────────────────────────────────

def generate_random_token() -> str:
    return secrets.token_hex(32)


def digest_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def token_matches(raw: str, stored_digest: Optional[str]) -> bool:
    if not raw or not stored_digest:
        return False
    return hmac.compare_digest(digest_token(raw), stored_digest)


# ─── Session JWT ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TokenSettings:
    secret_key: str
    algorithm: str = "HS256"
    session_days: int = DEFAULT_SESSION_DAYS
    remember_days: int = DEFAULT_REMEMBER_DAYS


class SessionTokenIssuer:
    """Signs and verifies session JWTs (``sub`` = user id)."""

    def __init__(self, settings: TokenSettings, *, clock: Callable[[], datetime] = now_utc):
        if not settings.secret_key:
            raise ValueError("JWT secret key is not configured")
        self._settings = settings
        self._clock = clock

    @property
    def session_max_age(self) -> int:
        return int(timedelta(days=self._settings.session_days).total_seconds())

    @property
    def remember_max_age(self) -> int:
        return int(timedelta(days=self._settings.remember_days).total_seconds())

    def remember_expiry(self) -> datetime:
        return self._clock() + timedelta(days=self._settings.remember_days)

    def issue(self, user_id: str) -> str:
        issued_at = self._clock()
        payload = {
            "sub": str(user_id),
            "type": SESSION_TOKEN_TYPE,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + timedelta(days=self._settings.session_days)).timestamp()),
        }
        return jwt.encode(payload, self._settings.secret_key, algorithm=self._settings.algorithm)

    def verify(self, token: Optional[str]) -> Optional[str]:
        """Return the user id for a valid token, ``None`` for anything else."""
        if not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self._settings.secret_key,
                algorithms=[self._settings.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return None

        if claims.get("type") != SESSION_TOKEN_TYPE:
            return None
        exp = claims.get("exp")
        # Expiry is checked against the injected clock, not the wall clock.
        if not isinstance(exp, (int, float)) or exp <= self._clock().timestamp():
            return None
        sub = claims.get("sub")
        return str(sub) if sub else None
