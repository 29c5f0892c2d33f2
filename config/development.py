import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Minutes after end_time during which an active session still accepts check-ins
SESSION_GRACE_MINUTES = int(os.getenv("SESSION_GRACE_MINUTES", "0"))
BACKUP_CODE_TTL_MINUTES = int(os.getenv("BACKUP_CODE_TTL_MINUTES", "30"))
DEFAULT_GEOFENCE_RADIUS_M = float(os.getenv("DEFAULT_GEOFENCE_RADIUS_M", "15"))
# strict | accuracy_tolerant
GEOFENCE_POLICY = os.getenv("GEOFENCE_POLICY", "strict")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also load database/seed.sql (demo directory data) on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
