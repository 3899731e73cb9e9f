from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..core.exceptions import ConflictError
from ..database.bootstrap import USERS
from ..database.connection import DatabaseConnection
from .model import User
from .repository import UserRepository


def _to_user(doc: Mapping[str, Any]) -> User:
    return User(
        user_id=str(doc["_id"]),
        name=doc.get("name") or "",
        email=doc.get("email") or "",
        password_hash=doc.get("password") or "",
        nim=doc.get("nim"),
        jurusan=doc.get("jurusan"),
        fakultas=doc.get("fakultas"),
        angkatan=doc.get("angkatan"),
        profile_image=doc.get("profileImage"),
        is_email_verified=bool(doc.get("isEmailVerified", False)),
        last_login_at=doc.get("lastLoginAt"),
        remember_token_hash=doc.get("rememberToken"),
        remember_token_expires=doc.get("rememberTokenExpires"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


_CLEAR_REMEMBER = {"$unset": {"rememberToken": "", "rememberTokenExpires": ""}}


class MongoUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @property
    def _users(self):
        return self._conn_factory.db[USERS]

    def _find_one(self, query: Mapping[str, Any]) -> Optional[User]:
        doc = self._users.find_one(query)
        return _to_user(doc) if doc else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._find_one({"_id": str(user_id)})

    def get_by_email(self, email: str) -> Optional[User]:
        return self._find_one({"email": email})

    def get_by_nim(self, nim: str) -> Optional[User]:
        return self._find_one({"nim": nim})

    def get_by_remember_token(self, token_hash: str, *, now: datetime) -> Optional[User]:
        return self._find_one({"rememberToken": token_hash, "rememberTokenExpires": {"$gt": now}})

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
        doc = {
            "_id": user_id,
            "name": name,
            "email": email,
            "password": password_hash,
            "nim": None,
            "jurusan": None,
            "fakultas": None,
            "angkatan": None,
            "profileImage": None,
            "isEmailVerified": False,
            "emailVerificationToken": email_verification_token,
            "lastLoginAt": None,
            "createdAt": created_at,
            "updatedAt": created_at,
        }
        try:
            self._users.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("An account with this email already exists", field="email")
        return _to_user(doc)

    def record_login(
        self,
        user_id: str,
        *,
        at: datetime,
        remember_token_hash: Optional[str] = None,
        remember_token_expires: Optional[datetime] = None,
    ) -> bool:
        if remember_token_hash:
            update = {
                "$set": {
                    "lastLoginAt": at,
                    "updatedAt": at,
                    "rememberToken": remember_token_hash,
                    "rememberTokenExpires": remember_token_expires,
                }
            }
        else:
            update = {"$set": {"lastLoginAt": at, "updatedAt": at}, **_CLEAR_REMEMBER}
        result = self._users.update_one({"_id": str(user_id)}, update)
        return result.matched_count > 0

    def clear_remember_token(self, user_id: str) -> bool:
        result = self._users.update_one({"_id": str(user_id)}, _CLEAR_REMEMBER)
        return result.modified_count > 0

    def clear_remember_token_by_hash(self, token_hash: str) -> bool:
        result = self._users.update_one({"rememberToken": token_hash}, _CLEAR_REMEMBER)
        return result.modified_count > 0

    def update_password(self, user_id: str, *, password_hash: str, at: datetime) -> bool:
        result = self._users.update_one(
            {"_id": str(user_id)},
            {"$set": {"password": password_hash, "updatedAt": at}},
        )
        return result.matched_count > 0

    def update_profile(self, user_id: str, *, fields: Mapping[str, Optional[str]], at: datetime) -> Optional[User]:
        try:
            doc = self._users.find_one_and_update(
                {"_id": str(user_id)},
                {"$set": {**dict(fields), "updatedAt": at}},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError("An account with this NIM already exists", field="nim")
        return _to_user(doc) if doc else None
