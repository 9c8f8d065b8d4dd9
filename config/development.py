import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-me-0123456789abcdef")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workline"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

JWT_ALGORITHM = "HS256"
TOKEN_TTL_MINUTES = int(os.getenv("TOKEN_TTL_MINUTES", "480"))

# Attendance / QR policy
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))
ROTATING_DEFAULT_MINUTES = float(os.getenv("ROTATING_DEFAULT_MINUTES", "1"))
STATIC_DEFAULT_HOURS = float(os.getenv("STATIC_DEFAULT_HOURS", "24"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
