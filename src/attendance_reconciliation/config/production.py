import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_reconciliation"),
    "connection_timeout": int(os.getenv("DB_TIMEOUT", "10")),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Kolkata")
TOLERANCE_MINUTES = int(os.getenv("TOLERANCE_MINUTES", "20"))
MIN_PUNCH_SEPARATION_MINUTES = int(os.getenv("MIN_PUNCH_SEPARATION_MINUTES", "30"))
STANDARD_SHIFT_HOURS = float(os.getenv("STANDARD_SHIFT_HOURS", "8"))
MIN_REQUIRED_HOURS = float(os.getenv("MIN_REQUIRED_HOURS", "4"))
FUZZY_THRESHOLD = float(os.getenv("FUZZY_THRESHOLD", "0.8"))
FUZZY_CLEAR_WINNER_MARGIN = float(os.getenv("FUZZY_CLEAR_WINNER_MARGIN", "0.15"))
MISMATCH_IN_SOURCE = os.getenv("MISMATCH_IN_SOURCE", "BIOMETRIC")
MISMATCH_OUT_SOURCE = os.getenv("MISMATCH_OUT_SOURCE", "WORKFLOW")
RECONCILE_WORKERS = int(os.getenv("RECONCILE_WORKERS", "8"))
MARK_ABSENT_SKIP_WEEKENDS = bool(int(os.getenv("MARK_ABSENT_SKIP_WEEKENDS", "0")))

BACKUP_DIR = os.getenv("BACKUP_DIR", "/var/lib/attendance-reconciliation/backups")
AUDIT_REPORT_DIR = os.getenv("AUDIT_REPORT_DIR", "")
