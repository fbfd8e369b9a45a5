import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
QR_SIGNING_KEY = os.getenv("QR_SIGNING_KEY", SECRET_KEY)

DB_BACKEND = "mysql"
DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

ACCESS_TOKEN_TTL_SECONDS = int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", "43200"))
CLASS_SESSION_TTL_SECONDS = 300
TEACHER_SELF_TTL_SECONDS = 120
LATE_THRESHOLD_SECONDS = 60

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
