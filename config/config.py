import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    # Session JWT / remember token
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or SECRET_KEY
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    SESSION_TOKEN_DAYS = int(os.environ.get("SESSION_TOKEN_DAYS", "7"))
    REMEMBER_TOKEN_DAYS = int(os.environ.get("REMEMBER_TOKEN_DAYS", "30"))

    # MongoDB
    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "schedule_undip")
    MONGO_TIMEOUT_MS = int(os.environ.get("MONGO_TIMEOUT_MS", "5000"))

    # Day boundaries for attendance status and the default ledger date
    ATTENDANCE_TIMEZONE = os.environ.get("ATTENDANCE_TIMEZONE", "UTC")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    COOKIE_SECURE = env_flag("COOKIE_SECURE")
    AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
