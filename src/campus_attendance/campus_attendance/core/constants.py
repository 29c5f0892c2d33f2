"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_M = 6_371_000.0

DEFAULT_GEOFENCE_RADIUS_M = 15.0
MIN_GEOFENCE_RADIUS_M = 5.0
MAX_GEOFENCE_RADIUS_M = 100.0

DEFAULT_SESSION_GRACE_MINUTES = 0
DEFAULT_BACKUP_CODE_TTL_MINUTES = 30
BACKUP_CODE_BYTES = 6

MIN_EXCUSE_REASON_LENGTH = 10

OK_ATTENDANCE_PERCENT = 80.0
WARNING_ATTENDANCE_PERCENT = 70.0

DEFAULT_LIST_LIMIT = 200
