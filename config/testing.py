import os

SECRET_KEY = "test-secret-key-with-enough-bytes-for-hs256"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workline_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

JWT_ALGORITHM = "HS256"
TOKEN_TTL_MINUTES = 5

LATE_GRACE_MINUTES = 5
ROTATING_DEFAULT_MINUTES = 1
STATIC_DEFAULT_HOURS = 24

AUTO_INIT_DB = False
AUTO_SEED_DB = False
