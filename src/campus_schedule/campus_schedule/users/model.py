from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Domain entity: a student account.

    Note: plain data object, no database access. ``remember_token_hash`` and
    ``remember_token_expires`` are either both set or both ``None``.
    """

    user_id: str
    name: str
    email: str
    password_hash: str
    nim: Optional[str] = None
    jurusan: Optional[str] = None
    fakultas: Optional[str] = None
    angkatan: Optional[str] = None
    profile_image: Optional[str] = None
    is_email_verified: bool = False
    last_login_at: Optional[datetime] = None
    remember_token_hash: Optional[str] = None
    remember_token_expires: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def public_view(self) -> dict:
        """Client-facing projection: never includes the password or tokens."""
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "nim": self.nim,
            "jurusan": self.jurusan,
            "fakultas": self.fakultas,
            "angkatan": self.angkatan,
            "profileImage": self.profile_image,
            "isEmailVerified": self.is_email_verified,
            "lastLoginAt": self.last_login_at.isoformat() if self.last_login_at else None,
        }


PROFILE_FIELDS = ("name", "nim", "jurusan", "fakultas", "angkatan", "profileImage")
