from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Presence status stored on a daily attendance record."""

    PRESENT = "Present"
    HALF_DAY = "Half Day"
    LATE = "Late"
    ABSENT = "Absent"


class VerificationMethod(str, Enum):
    """How a daily record came to exist. Manual and leave records are never overwritten."""

    BIOMETRIC = "Biometric"
    AUTO = "Auto"
    MANUAL = "Manual"
    LEAVE = "Leave"


class Completeness(str, Enum):
    COMPLETE = "COMPLETE"
    INCOMPLETE = "INCOMPLETE"


class Source(str, Enum):
    WORKFLOW = "WORKFLOW"
    BIOMETRIC = "BIOMETRIC"


class MergeCase(str, Enum):
    BOTH_MATCHED = "BOTH_MATCHED"
    BOTH_MISMATCH = "BOTH_MISMATCH"
    WF_ONLY = "WF_ONLY"
    BIO_ONLY = "BIO_ONLY"
    NO_OUT = "NO_OUT"
    INCOMPLETE = "INCOMPLETE"


class PunchType(str, Enum):
    """Direction reported by the device, when it reports one."""

    IN = "In"
    OUT = "Out"
    UNKNOWN = "Unknown"


class MatchType(str, Enum):
    DIRECT_ID_MATCH = "DIRECT_ID_MATCH"
    FIRST_NAME_EXACT = "FIRST_NAME_EXACT"
    FIRST_NAME_SURNAME_INITIAL = "FIRST_NAME_SURNAME_INITIAL"
    FIRST_NAME_LAST_NAME_PREFIX = "FIRST_NAME_LAST_NAME_PREFIX"
    FUZZY_MATCH = "FUZZY_MATCH"
    FUZZY_MATCH_BEST = "FUZZY_MATCH_BEST"


class ResolutionErrorCode(str, Enum):
    AMBIGUOUS_MATCH = "AMBIGUOUS_MATCH"
    NO_MATCH_FOUND = "NO_MATCH_FOUND"
    EMPTY_DIRECTORY = "EMPTY_DIRECTORY"


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class IssueType(str, Enum):
    UNRESOLVED_BIOMETRIC_ID = "UNRESOLVED_BIOMETRIC_ID"
    DUPLICATE_PUNCH = "DUPLICATE_PUNCH"
    DATE_MISMATCH = "DATE_MISMATCH"
    MIDNIGHT_CROSSOVER = "MIDNIGHT_CROSSOVER"
    OUT_OF_ORDER_PUNCH_SEQUENCE = "OUT_OF_ORDER_PUNCH_SEQUENCE"
    MULTIPLE_IN_PUNCHES = "MULTIPLE_IN_PUNCHES"
    MULTIPLE_OUT_PUNCHES = "MULTIPLE_OUT_PUNCHES"
    INCORRECT_IN_PUNCH_SELECTION = "INCORRECT_IN_PUNCH_SELECTION"
    INCORRECT_OUT_PUNCH_SELECTION = "INCORRECT_OUT_PUNCH_SELECTION"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    MISSING_BIOMETRIC_MARKED_ABSENT = "MISSING_BIOMETRIC_MARKED_ABSENT"


class Priority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class MigrationStep(str, Enum):
    """Migration state machine, in execution order."""

    BACKUP = "BACKUP"
    AUDIT_BEFORE = "AUDIT_BEFORE"
    CLEAN = "CLEAN"
    FIX_IDENTITIES = "FIX_IDENTITIES"
    DEDUP = "DEDUP"
    RECONCILE = "RECONCILE"
    AUDIT_AFTER = "AUDIT_AFTER"
    VERIFY = "VERIFY"


class AnomalyType(str, Enum):
    UNUSUALLY_LONG_SHIFT = "UNUSUALLY_LONG_SHIFT"
    LARGE_IN_TIME_MISMATCH = "LARGE_IN_TIME_MISMATCH"
    MIDNIGHT_CROSSOVER = "MIDNIGHT_CROSSOVER"
