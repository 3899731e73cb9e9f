from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Storage interface for users.

    Note: the service layer depends on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_nim(self, nim: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_remember_token(self, token_hash: str, *, now: datetime) -> Optional[User]:
        """Return the user holding this remember-token digest, if not expired."""
        raise NotImplementedError

    def create_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        password_hash: str,
        email_verification_token: str,
        created_at: datetime,
    ) -> User:
        """Insert a user; raises ConflictError when the email is taken."""
        raise NotImplementedError

    def record_login(
        self,
        user_id: str,
        *,
        at: datetime,
        remember_token_hash: Optional[str] = None,
        remember_token_expires: Optional[datetime] = None,
    ) -> bool:
        """Set lastLoginAt and replace (or, when no hash is given, clear) the remember token."""
        raise NotImplementedError

    def clear_remember_token(self, user_id: str) -> bool:
        raise NotImplementedError

    def clear_remember_token_by_hash(self, token_hash: str) -> bool:
        raise NotImplementedError

    def update_password(self, user_id: str, *, password_hash: str, at: datetime) -> bool:
        raise NotImplementedError

    def update_profile(self, user_id: str, *, fields: Mapping[str, Optional[str]], at: datetime) -> Optional[User]:
        raise NotImplementedError
