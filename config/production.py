import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "vacation_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Several app processes share the database, so locks must live there too.
LOCK_BACKEND = os.getenv("LOCK_BACKEND", "mysql")
LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))

HOLIDAY_SOURCE = os.getenv("HOLIDAY_SOURCE", "database")
HOLIDAYS = os.getenv("HOLIDAYS", "")

HR_APPROVER_IDS = os.getenv("HR_APPROVER_IDS", "")
