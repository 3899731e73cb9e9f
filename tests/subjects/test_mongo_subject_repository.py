from __future__ import annotations

from datetime import datetime

import pytest
from bson import ObjectId

from src.campus_schedule.campus_schedule.core.constants import MAX_MEETINGS
from src.campus_schedule.campus_schedule.database.bootstrap import SUBJECTS
from src.campus_schedule.campus_schedule.subjects.mongo_subject_repository import MongoSubjectRepository
from tests.mongo_fakes import MongomockConnection

AT = datetime(2025, 3, 10, 9, 30)


@pytest.fixture()
def conn():
    return MongomockConnection()


@pytest.fixture()
def repo(conn):
    return MongoSubjectRepository(conn)


def _insert(conn, **doc) -> str:
    oid = ObjectId()
    conn.db[SUBJECTS].insert_one({"_id": oid, "id": str(oid), "userId": "u1", "name": "Algoritma", **doc})
    return str(oid)


def _add(repo, key, day, user_id="u1"):
    return repo.atomic_increment_and_set(
        key, user_id=user_id, attendance_date=day, attended=True, increment=1, max_meeting=MAX_MEETINGS - 1, at=AT
    )


def _remove(repo, key, day, **kwargs):
    return repo.atomic_increment_and_set(
        key, user_id="u1", attendance_date=day, attended=False, increment=-1, min_meeting=1, at=AT, **kwargs
    )


def test_add_is_idempotent_per_date(conn, repo):
    key = _insert(conn, meeting=0, attendanceDates=[])

    first = _add(repo, key, "2025-03-03")
    second = _add(repo, key, "2025-03-03")

    assert first.meeting == 1
    assert first.attendance_dates == ("2025-03-03",)
    assert second is None
    assert conn.db[SUBJECTS].find_one({"_id": ObjectId(key)})["meeting"] == 1


def test_add_stops_at_the_meeting_cap(conn, repo):
    full_dates = [f"2025-01-{d:02d}" for d in range(1, MAX_MEETINGS + 1)]
    key = _insert(conn, meeting=MAX_MEETINGS, attendanceDates=full_dates)

    assert _add(repo, key, "2025-03-03") is None
    assert conn.db[SUBJECTS].find_one({"_id": ObjectId(key)})["meeting"] == MAX_MEETINGS


def test_add_on_a_document_without_a_counter(conn, repo):
    key = _insert(conn, attendanceDates=[])

    updated = _add(repo, key, "2025-03-03")

    assert updated is not None
    assert updated.meeting == 1
    assert conn.db[SUBJECTS].find_one({"_id": ObjectId(key)})["meeting"] == 1


def test_add_on_a_document_without_attendance_dates(conn, repo):
    key = _insert(conn)

    updated = _add(repo, key, "2025-03-03")

    assert updated.meeting == 1
    assert updated.attendance_dates == ("2025-03-03",)


def test_remove_floors_at_zero(conn, repo):
    key = _insert(conn, meeting=0, attendanceDates=["2025-03-03"])

    assert _remove(repo, key, "2025-03-03") is None
    assert _remove(repo, key, "2025-03-03", guard_date=False) is None

    pulled = repo.atomic_increment_and_set(
        key, user_id="u1", attendance_date="2025-03-03", attended=False, increment=0, at=AT
    )
    assert pulled.meeting == 0
    assert pulled.attendance_dates == ()


def test_unguarded_remove_decrements_without_the_date(conn, repo):
    key = _insert(conn, meeting=2, attendanceDates=["2025-03-03"])

    assert _remove(repo, key, "2025-03-10") is None
    updated = _remove(repo, key, "2025-03-10", guard_date=False)

    assert updated.meeting == 1
    assert updated.attendance_dates == ("2025-03-03",)


def test_remove_on_a_document_without_a_counter_matches_nothing(conn, repo):
    key = _insert(conn, attendanceDates=["2025-03-03"])

    assert _remove(repo, key, "2025-03-03", guard_date=False) is None


def test_mutations_are_scoped_to_the_owner(conn, repo):
    key = _insert(conn, meeting=0, attendanceDates=[])

    assert _add(repo, key, "2025-03-03", user_id="u2") is None
    assert repo.find_one_by_alternate_keys(key, user_id="u2") is None
    assert repo.find_one_by_alternate_keys(key, user_id="u1").meeting == 0


def test_initialize_attendance_dates_backfills_only_the_given_owner(conn, repo):
    mine = _insert(conn)
    theirs = _insert(conn, userId="u2")
    _insert(conn, meeting=3, attendanceDates=["2025-03-03"])

    found, updated = repo.initialize_attendance_dates("u1")

    assert (found, updated) == (1, 1)
    assert conn.db[SUBJECTS].find_one({"_id": ObjectId(mine)})["attendanceDates"] == []
    assert conn.db[SUBJECTS].find_one({"_id": ObjectId(mine)})["meeting"] == 0
    assert "attendanceDates" not in conn.db[SUBJECTS].find_one({"_id": ObjectId(theirs)})

    assert repo.initialize_attendance_dates() == (1, 1)
    assert repo.initialize_attendance_dates() == (0, 0)
