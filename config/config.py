"""Defaults shared by every environment.

Each environment module starts from these values and overrides what differs.
"""

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "event_attendance"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Attendance rules
SUBMISSION_WINDOW_DAYS = int(os.getenv("SUBMISSION_WINDOW_DAYS", "3"))
DEFAULT_MINIMUM_MINUTES_PER_WEEK = int(os.getenv("DEFAULT_MINIMUM_MINUTES_PER_WEEK", "240"))
DEFAULT_PASS_MARK = int(os.getenv("DEFAULT_PASS_MARK", "75"))
