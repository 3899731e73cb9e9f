import os

SECRET_KEY = "test-secret"
JWT_SECRET_KEY = "test-jwt-secret"
JWT_ALGORITHM = "HS256"
SESSION_TOKEN_DAYS = 7
REMEMBER_TOKEN_DAYS = 30

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "schedule_undip_test")
MONGO_TIMEOUT_MS = 2000

ATTENDANCE_TIMEZONE = "UTC"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
COOKIE_SECURE = False

AUTO_INIT_DB = False
