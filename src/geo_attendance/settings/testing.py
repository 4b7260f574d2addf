from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
SKIP_GEOFENCE = False
OFFICE_TIMEZONE = "UTC"
