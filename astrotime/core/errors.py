# astrotime/core/errors.py
# -----------------------------------------------------------------------------
# Time Kernel Error Taxonomy
#
# Every failure the kernel reports derives from TimeKernelError and carries an
# ErrorClass tag plus a free-form context dict, so callers can decide whether
# to retry with a refreshed leap-second table or abort.
#
#   MalformedDateString          - string does not match YYYY-MM-DDThh:mm:ss.mmm
#   InvalidCalendarField         - a calendar field is out of range
#   DateBeforeLeapSecondHistory  - UTC query precedes the first table entry
#   LeapSecondTableUnavailable   - table missing, empty, malformed or unreachable
# -----------------------------------------------------------------------------

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

__all__ = [
    "ErrorClass",
    "TimeKernelError",
    "MalformedDateString",
    "InvalidCalendarField",
    "DateBeforeLeapSecondHistory",
    "LeapSecondTableUnavailable",
]


class ErrorClass(Enum):
    MALFORMED_INPUT = "malformed_input"
    CALENDAR_FIELD = "calendar_field"
    LEAP_SECOND_COVERAGE = "leap_second_coverage"
    LEAP_SECOND_SOURCE = "leap_second_source"


class TimeKernelError(Exception):
    """Base exception for time kernel computations."""
    def __init__(self, message: str, error_class: ErrorClass, **context: Any):
        super().__init__(message)
        self.error_class = error_class
        self.context: Dict[str, Any] = context


class MalformedDateString(TimeKernelError, ValueError):
    """Input string is not a YYYY-MM-DDThh:mm:ss.mmm literal."""
    def __init__(self, value: Any, reason: str = "expected YYYY-MM-DDThh:mm:ss.mmm"):
        super().__init__(
            f"Malformed date string {value!r}: {reason}",
            ErrorClass.MALFORMED_INPUT,
            value=value,
        )


class InvalidCalendarField(TimeKernelError, ValueError):
    """Calendar field outside its valid range."""
    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            f"Invalid {field} {value!r}: {reason}",
            ErrorClass.CALENDAR_FIELD,
            field=field,
            value=value,
        )


class DateBeforeLeapSecondHistory(TimeKernelError, LookupError):
    """UTC query earlier than the first leap-second table entry."""
    def __init__(self, jd: float, first_jd: float):
        super().__init__(
            f"JD {jd!r} precedes leap-second history starting at JD {first_jd!r}",
            ErrorClass.LEAP_SECOND_COVERAGE,
            jd=jd,
            first_jd=first_jd,
        )


class LeapSecondTableUnavailable(TimeKernelError):
    """Leap-second table missing, empty, malformed or unreachable."""
    def __init__(self, message: str, **context: Any):
        super().__init__(message, ErrorClass.LEAP_SECOND_SOURCE, **context)
