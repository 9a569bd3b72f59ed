class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class SequenceError(ValidationError):
    """Raised when an OUT time precedes its IN time."""

    def __init__(self, message: str, *, code: str = "OUT_BEFORE_IN"):
        super().__init__(message)
        self.code = code


class DateFormatError(ValidationError):
    """Raised when a raw date-time string matches none of the accepted formats."""

    def __init__(self, raw_value: str):
        super().__init__(f"Invalid date format: {raw_value!r}")
        self.raw_value = raw_value


class PersistenceError(DomainError):
    """Raised when a repository cannot complete a write."""
