import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SESSION_GRACE_MINUTES = 0
BACKUP_CODE_TTL_MINUTES = 30
DEFAULT_GEOFENCE_RADIUS_M = 15.0
GEOFENCE_POLICY = "strict"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
