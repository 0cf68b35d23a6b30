import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "meal_settlement_db"),
}

# Local hour on the meal's day after which cancellations are frozen.
MEAL_CANCELLATION_CUTOFF_HOUR = int(os.getenv("MEAL_CANCELLATION_CUTOFF_HOUR", "8"))

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo groups/children on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
