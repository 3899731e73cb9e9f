from __future__ import annotations

import re
from typing import List

from ..core.constants import MIN_PASSWORD_LENGTH, PASSWORD_SYMBOLS
from ..core.exceptions import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long", field=field_name)
    return value


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def password_strength_errors(password: str) -> List[str]:
    """Check every strength rule and return all violations (empty list = OK)."""
    password = password or ""
    errors: List[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        errors.append(f"Password must contain at least one special character ({PASSWORD_SYMBOLS})")
    return errors
