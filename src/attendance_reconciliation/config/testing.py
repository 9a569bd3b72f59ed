import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_reconciliation_test"),
    "connection_timeout": 5,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

ORG_TIMEZONE = "Asia/Kolkata"
TOLERANCE_MINUTES = 20
MIN_PUNCH_SEPARATION_MINUTES = 30
STANDARD_SHIFT_HOURS = 8.0
MIN_REQUIRED_HOURS = 4.0
FUZZY_THRESHOLD = 0.8
FUZZY_CLEAR_WINNER_MARGIN = 0.15
RECONCILE_WORKERS = 1
MARK_ABSENT_SKIP_WEEKENDS = False

BACKUP_DIR = os.getenv("BACKUP_DIR", "./data-backups-test")
AUDIT_REPORT_DIR = ""
