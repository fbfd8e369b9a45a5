import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
# Signs QR session tokens and access tokens; loaded once into the container.
QR_SIGNING_KEY = os.getenv("QR_SIGNING_KEY", SECRET_KEY)

DB_BACKEND = os.getenv("DB_BACKEND", "mysql")
DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

ACCESS_TOKEN_TTL_SECONDS = int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", "43200"))
CLASS_SESSION_TTL_SECONDS = int(os.getenv("CLASS_SESSION_TTL_SECONDS", "300"))
TEACHER_SELF_TTL_SECONDS = int(os.getenv("TEACHER_SELF_TTL_SECONDS", "120"))
LATE_THRESHOLD_SECONDS = int(os.getenv("LATE_THRESHOLD_SECONDS", "60"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
