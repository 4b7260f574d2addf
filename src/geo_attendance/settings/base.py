"""Settings shared by every environment, read from the process environment."""
import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Attendance policy
OFFICE_START_HOUR = int(os.getenv("OFFICE_START_HOUR", "10"))
# Carried as config only; no status rule reads it
OFFICE_END_HOUR = int(os.getenv("OFFICE_END_HOUR", "18"))
LATE_THRESHOLD_MINUTES = int(os.getenv("LATE_THRESHOLD_MINUTES", "60"))
HALF_DAY_HOUR = int(os.getenv("HALF_DAY_HOUR", "14"))
# Empty means the server's local time
OFFICE_TIMEZONE = os.getenv("OFFICE_TIMEZONE", "")

# "mysql" writes to the notifications table, "log" only logs them
NOTIFICATION_STORE = os.getenv("NOTIFICATION_STORE", "mysql").strip().lower()
