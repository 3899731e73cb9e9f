from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.campus_schedule.campus_schedule.users.mongo_user_repository import MongoUserRepository
from tests.mongo_fakes import MongomockConnection

AT = datetime(2025, 3, 10, 9, 30)


@pytest.fixture()
def repo():
    repo = MongoUserRepository(MongomockConnection())
    repo.create_user(
        user_id="u1",
        name="Siti",
        email="siti@students.undip.ac.id",
        password_hash="hash",
        email_verification_token="verify",
        created_at=AT,
    )
    return repo


def test_remember_token_lookup_honours_expiry(repo):
    expires = AT + timedelta(days=30)
    repo.record_login("u1", at=AT, remember_token_hash="digest", remember_token_expires=expires)

    assert repo.get_by_remember_token("digest", now=AT).user_id == "u1"
    assert repo.get_by_remember_token("digest", now=expires - timedelta(seconds=1)) is not None
    assert repo.get_by_remember_token("digest", now=expires) is None
    assert repo.get_by_remember_token("other", now=AT) is None


def test_login_without_remember_clears_the_token(repo):
    repo.record_login("u1", at=AT, remember_token_hash="digest", remember_token_expires=AT + timedelta(days=30))

    repo.record_login("u1", at=AT + timedelta(hours=1))

    user = repo.get_by_id("u1")
    assert user.remember_token_hash is None
    assert user.remember_token_expires is None
    assert repo.get_by_remember_token("digest", now=AT) is None


def test_clear_remember_token_by_hash(repo):
    repo.record_login("u1", at=AT, remember_token_hash="digest", remember_token_expires=AT + timedelta(days=30))

    assert repo.clear_remember_token_by_hash("digest") is True
    assert repo.clear_remember_token_by_hash("digest") is False
    assert repo.get_by_remember_token("digest", now=AT) is None
