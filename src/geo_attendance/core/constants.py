"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

MIN_RADIUS_METERS = 1
MAX_RADIUS_METERS = 1000
DEFAULT_RADIUS_METERS = 50

DEFAULT_OFFICE_START_HOUR = 10
DEFAULT_OFFICE_END_HOUR = 18
DEFAULT_LATE_THRESHOLD_MINUTES = 60
DEFAULT_HALF_DAY_HOUR = 14

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_TEAM_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 100

# Compare-and-set attempts before a write is reported as a conflict.
MAX_WRITE_ATTEMPTS = 3

# How many regions the geofence audit log lists for a rejected check-in.
AUDIT_NEAREST_REGIONS = 3

BYPASS_REGION_ID = "debug-loc"
BYPASS_REGION_NAME = "Debug Location (Geofence Disabled)"
