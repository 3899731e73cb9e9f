import os

from .config import Config, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
JWT_ALGORITHM = Config.JWT_ALGORITHM
SESSION_TOKEN_DAYS = Config.SESSION_TOKEN_DAYS
REMEMBER_TOKEN_DAYS = Config.REMEMBER_TOKEN_DAYS

MONGO_URI = Config.MONGO_URI
MONGO_DB_NAME = Config.MONGO_DB_NAME
MONGO_TIMEOUT_MS = Config.MONGO_TIMEOUT_MS

ATTENDANCE_TIMEZONE = Config.ATTENDANCE_TIMEZONE

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
COOKIE_SECURE = env_flag("COOKIE_SECURE", "1")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
