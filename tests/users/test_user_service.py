from __future__ import annotations

import pytest

from src.campus_schedule.campus_schedule.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.campus_schedule.campus_schedule.core.security import hash_password
from src.campus_schedule.campus_schedule.users.service import UserService
from tests.fakes import FakeClock, InMemoryUsers


def _make_service():
    users = InMemoryUsers()
    for uid, email in (("u1", "a@undip.ac.id"), ("u2", "b@undip.ac.id")):
        users.create_user(
            user_id=uid,
            name=uid.upper(),
            email=email,
            password_hash=hash_password("Secret123!"),
            email_verification_token="x",
            created_at=FakeClock().now,
        )
    return UserService(users, clock=FakeClock()), users


def test_update_profile_whitelists_fields():
    svc, users = _make_service()

    view = svc.update_profile("u1", {"nim": " 24060122 ", "jurusan": "Informatika", "email": "evil@x.io"})

    assert view["nim"] == "24060122"
    assert view["jurusan"] == "Informatika"
    assert users.get_by_id("u1").email == "a@undip.ac.id"


def test_update_profile_rejects_taken_nim():
    svc, _ = _make_service()
    svc.update_profile("u2", {"nim": "123"})

    with pytest.raises(ConflictError):
        svc.update_profile("u1", {"nim": "123"})


def test_update_profile_rejects_empty_name_and_empty_payload():
    svc, _ = _make_service()

    with pytest.raises(ValidationError):
        svc.update_profile("u1", {"name": "  "})
    with pytest.raises(ValidationError):
        svc.update_profile("u1", {})


def test_get_profile_missing_user():
    svc, _ = _make_service()

    with pytest.raises(NotFoundError):
        svc.get_profile("nope")
