import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "vacation_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Balance key locks: "mysql" (GET_LOCK, works across processes) or "thread" (single process)
LOCK_BACKEND = os.getenv("LOCK_BACKEND", "thread")
LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))

# Holidays: "database" (calendar_days table) or "static" (HOLIDAYS, comma separated YYYY-MM-DD)
HOLIDAY_SOURCE = os.getenv("HOLIDAY_SOURCE", "database")
HOLIDAYS = os.getenv("HOLIDAYS", "")

# Employee ids allowed to approve/reject any request (comma separated)
HR_APPROVER_IDS = os.getenv("HR_APPROVER_IDS", "1")
