from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .attendance.mongo_attendance_repository import MongoAttendanceHistoryRepository
from .attendance.repository import AttendanceHistoryRepository
from .attendance.service import AttendanceHistoryService, AttendanceLedger
from .common.datetime_utils import get_zone, now_utc
from .core.security import SessionTokenIssuer, TokenSettings
from .database.connection import DBConfig, DatabaseConnection
from .settings.mongo_settings_repository import MongoSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService
from .subjects.mongo_subject_repository import MongoSubjectRepository
from .subjects.repository import SubjectRepository
from .subjects.service import SubjectService
from .tasks.mongo_task_repository import MongoTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .users.mongo_user_repository import MongoUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    subjects_repo: SubjectRepository
    history_repo: AttendanceHistoryRepository
    settings_repo: SettingsRepository
    tasks_repo: TaskRepository

    tokens: SessionTokenIssuer
    auth_service: AuthService
    user_service: UserService
    subject_service: SubjectService
    attendance_ledger: AttendanceLedger
    history_service: AttendanceHistoryService
    settings_service: SettingsService
    task_service: TaskService


def assemble(
    *,
    users_repo: UserRepository,
    subjects_repo: SubjectRepository,
    history_repo: AttendanceHistoryRepository,
    settings_repo: SettingsRepository,
    tasks_repo: TaskRepository,
    token_settings: TokenSettings,
    timezone_name: str = "UTC",
    clock: Callable[[], Any] = now_utc,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories."""
    # Fail at startup on an unknown zone name.
    get_zone(timezone_name)

    tokens = SessionTokenIssuer(token_settings, clock=clock)
    return Container(
        conn=conn,
        users_repo=users_repo,
        subjects_repo=subjects_repo,
        history_repo=history_repo,
        settings_repo=settings_repo,
        tasks_repo=tasks_repo,
        tokens=tokens,
        auth_service=AuthService(users_repo, tokens, clock=clock),
        user_service=UserService(users_repo, clock=clock),
        subject_service=SubjectService(subjects_repo, clock=clock, timezone_name=timezone_name),
        attendance_ledger=AttendanceLedger(subjects_repo, history_repo, clock=clock, timezone_name=timezone_name),
        history_service=AttendanceHistoryService(history_repo, subjects_repo, clock=clock, timezone_name=timezone_name),
        settings_service=SettingsService(settings_repo, clock=clock),
        task_service=TaskService(tasks_repo, subjects_repo, clock=clock),
    )


def build_container(settings: Any) -> Container:
    config = DBConfig(
        uri=str(getattr(settings, "MONGO_URI")),
        database=str(getattr(settings, "MONGO_DB_NAME", "schedule_undip")),
        timeout_ms=int(getattr(settings, "MONGO_TIMEOUT_MS", 5000)),
    )
    conn = DatabaseConnection.get_instance(config)

    token_settings = TokenSettings(
        secret_key=str(getattr(settings, "JWT_SECRET_KEY")),
        algorithm=str(getattr(settings, "JWT_ALGORITHM", "HS256")),
        session_days=int(getattr(settings, "SESSION_TOKEN_DAYS", 7)),
        remember_days=int(getattr(settings, "REMEMBER_TOKEN_DAYS", 30)),
    )

    return assemble(
        users_repo=MongoUserRepository(conn),
        subjects_repo=MongoSubjectRepository(conn),
        history_repo=MongoAttendanceHistoryRepository(conn),
        settings_repo=MongoSettingsRepository(conn),
        tasks_repo=MongoTaskRepository(conn),
        token_settings=token_settings,
        timezone_name=str(getattr(settings, "ATTENDANCE_TIMEZONE", "UTC")),
        conn=conn,
    )
