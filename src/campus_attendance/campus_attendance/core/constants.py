"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CLASS_SESSION_TTL_SECONDS = 5 * 60
TEACHER_SELF_TTL_SECONDS = 2 * 60
LATE_THRESHOLD_SECONDS = 60

TOKEN_ALGORITHM = "HS256"
SESSION_ID_BYTES = 16

DEFAULT_ACCESS_TOKEN_TTL_SECONDS = 12 * 60 * 60
DEFAULT_REPORT_DAYS = 30
DEFAULT_PERIOD = 1

WORK_HOURS_PRECISION = 2
