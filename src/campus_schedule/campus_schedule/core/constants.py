"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_REMEMBER_DAYS = 30
MAX_MEETINGS = 14
MIN_PASSWORD_LENGTH = 8
PASSWORD_SYMBOLS = "@$!%*?&"
DEFAULT_HISTORY_LIMIT = 100

AUTH_COOKIE = "auth_token"
REMEMBER_COOKIE = "remember_token"

ATTENDANCE_URL_PREFIX = "https://siap.undip.ac.id/a/"
