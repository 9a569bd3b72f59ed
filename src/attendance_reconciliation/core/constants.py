"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ORG_TIMEZONE = "Asia/Kolkata"

DEFAULT_TOLERANCE_MINUTES = 20
DEFAULT_MIN_PUNCH_SEPARATION_MINUTES = 30
DEFAULT_STANDARD_SHIFT_HOURS = 8.0
DEFAULT_MIN_REQUIRED_HOURS = 4.0

DEFAULT_FUZZY_THRESHOLD = 0.80
DEFAULT_FUZZY_CLEAR_WINNER_MARGIN = 0.15

DEFAULT_RECONCILE_WORKERS = 4
DEFAULT_DB_TIMEOUT_SECONDS = 10

LONG_SHIFT_HOURS = 16
LARGE_IN_MISMATCH_MINUTES = 60

# Accepted raw punch date-time formats, tried in order.
ACCEPTED_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%d-%m-%Y %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%m/%d/%Y %H:%M",
    "%Y-%m-%d",
)
