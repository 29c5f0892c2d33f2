import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SESSION_GRACE_MINUTES = int(os.getenv("SESSION_GRACE_MINUTES", "0"))
BACKUP_CODE_TTL_MINUTES = int(os.getenv("BACKUP_CODE_TTL_MINUTES", "30"))
DEFAULT_GEOFENCE_RADIUS_M = float(os.getenv("DEFAULT_GEOFENCE_RADIUS_M", "15"))
GEOFENCE_POLICY = os.getenv("GEOFENCE_POLICY", "strict")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
# Optional: also load database/seed.sql (demo directory data) on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
