from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional

from ..common.datetime_utils import now_utc
from ..common.validators import (
    is_valid_email,
    normalize_email,
    password_strength_errors,
    require_min_length,
    require_non_empty,
)
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import IdentitySource
from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from ..core.security import (
    SessionTokenIssuer,
    digest_token,
    generate_random_token,
    hash_password,
    token_matches,
    verify_password,
)
from .model import PROFILE_FIELDS
from .repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class LoginResult:
    user: dict
    session_token: str
    remember_token: Optional[str] = None


@dataclass(frozen=True)
class ResolvedIdentity:
    """Outcome of resolving request credentials.

    ``renewed_session_token`` is set only when the caller came in on a
    remember token and must be handed a fresh session token.
    """

    user_id: str
    source: IdentitySource
    renewed_session_token: Optional[str] = None

    @property
    def needs_renewal(self) -> bool:
        return self.renewed_session_token is not None


class AuthService:
    """Use cases: register, login, resolve identity, logout, change password."""

    def __init__(
        self,
        users: UserRepository,
        tokens: SessionTokenIssuer,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._users = users
        self._tokens = tokens
        self._clock = clock

    def register(self, *, name: str, email: str, password: str) -> dict:
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")
        name = require_non_empty(name, "name")
        email = normalize_email(email)
        if not is_valid_email(email):
            raise ValidationError("Please provide a valid email address", field="email")

        errors = password_strength_errors(password)
        if errors:
            raise ValidationError("Password does not meet requirements", errors=errors, field="password")

        if self._users.get_by_email(email):
            raise ConflictError("An account with this email already exists", field="email")

        user = self._users.create_user(
            user_id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=hash_password(password),
            email_verification_token=generate_random_token(),
            created_at=self._clock(),
        )
        logger.info("registered user %s", user.user_id)
        return user.public_view()

    def login(self, *, email: str, password: str, remember_me: bool = False) -> LoginResult:
        if not email or not password:
            raise ValidationError("Email and password are required")
        email = normalize_email(email)
        if not is_valid_email(email):
            raise ValidationError("Please provide a valid email address", field="email")

        user = self._users.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)

        now = self._clock()
        remember_token = None
        if remember_me:
            remember_token = generate_random_token()
            self._users.record_login(
                user.user_id,
                at=now,
                remember_token_hash=digest_token(remember_token),
                remember_token_expires=self._tokens.remember_expiry(),
            )
        else:
            self._users.record_login(user.user_id, at=now)

        refreshed = self._users.get_by_id(user.user_id) or user
        return LoginResult(
            user=refreshed.public_view(),
            session_token=self._tokens.issue(user.user_id),
            remember_token=remember_token,
        )

    def resolve_identity(
        self,
        session_token: Optional[str] = None,
        remember_token: Optional[str] = None,
    ) -> ResolvedIdentity:
        user_id = self._tokens.verify(session_token)
        if user_id:
            return ResolvedIdentity(user_id=user_id, source=IdentitySource.SESSION)

        if remember_token:
            user = self._users.get_by_remember_token(digest_token(remember_token), now=self._clock())
            if user and token_matches(remember_token, user.remember_token_hash):
                return ResolvedIdentity(
                    user_id=user.user_id,
                    source=IdentitySource.REMEMBER,
                    renewed_session_token=self._tokens.issue(user.user_id),
                )

        raise UnauthenticatedError("Not authenticated")

    def logout(self, session_token: Optional[str] = None, remember_token: Optional[str] = None) -> None:
        """Clear the stored remember token. Never raises."""
        try:
            user_id = self._tokens.verify(session_token)
            if user_id:
                self._users.clear_remember_token(user_id)
            elif remember_token:
                self._users.clear_remember_token_by_hash(digest_token(remember_token))
        except Exception:
            logger.warning("remember token cleanup failed during logout", exc_info=True)

    def current_user(self, identity: ResolvedIdentity) -> dict:
        user = self._users.get_by_id(identity.user_id)
        if not user:
            raise UnauthenticatedError("Not authenticated")
        return user.public_view()

    def change_password(self, identity: ResolvedIdentity, *, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")
        require_min_length(new_password, "newPassword", MIN_PASSWORD_LENGTH)

        user = self._users.get_by_id(identity.user_id)
        if not user:
            raise NotFoundError("User not found")

        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect", field="currentPassword")
        if verify_password(new_password, user.password_hash):
            raise ValidationError("New password must be different from current password", field="newPassword")

        self._users.update_password(user.user_id, password_hash=hash_password(new_password), at=self._clock())
        logger.info("password changed for user %s", user.user_id)


class UserService:
    """Use case: read and edit the caller's profile."""

    def __init__(self, users: UserRepository, *, clock: Callable[[], datetime] = now_utc):
        self._users = users
        self._clock = clock

    def get_profile(self, user_id: str) -> dict:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user.public_view()

    def update_profile(self, user_id: str, data: Mapping[str, object]) -> dict:
        fields: dict = {}
        for key in PROFILE_FIELDS:
            if key not in data:
                continue
            value = data[key]
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{key} must be a string", field=key)
            value = value.strip() if isinstance(value, str) else None
            fields[key] = value or None

        if "name" in fields and not fields["name"]:
            raise ValidationError("name is required", field="name")
        if not fields:
            raise ValidationError("Nothing to update")

        nim = fields.get("nim")
        if nim:
            owner = self._users.get_by_nim(nim)
            if owner and owner.user_id != user_id:
                raise ConflictError("An account with this NIM already exists", field="nim")

        user = self._users.update_profile(user_id, fields=fields, at=self._clock())
        if not user:
            raise NotFoundError("User not found")
        return user.public_view()
