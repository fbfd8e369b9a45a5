SECRET_KEY = "test-secret"
QR_SIGNING_KEY = "test-qr-signing-key"

DB_BACKEND = "memory"
DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "campus_attendance_test",
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

ACCESS_TOKEN_TTL_SECONDS = 3600
CLASS_SESSION_TTL_SECONDS = 300
TEACHER_SELF_TTL_SECONDS = 120
LATE_THRESHOLD_SECONDS = 60

AUTO_INIT_DB = False
