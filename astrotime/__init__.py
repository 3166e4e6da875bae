"""
astrotime

Astronomical timescale conversion (TAI, UTC, TT, TDB) and Julian Day <->
Gregorian calendar arithmetic, driven by the USNO leap-second history.
"""

__version__ = "1.0.0"

# Version information
VERSION_INFO = {
    "major": 1,
    "minor": 0,
    "patch": 0,
}

from .core.errors import (  # noqa: E402
    TimeKernelError,
    MalformedDateString,
    InvalidCalendarField,
    DateBeforeLeapSecondHistory,
    LeapSecondTableUnavailable,
)
from .core.timescales import TimeScale  # noqa: E402
from .core.time_kernel import (  # noqa: E402
    convert_scale,
    jd_to_gregorian_string,
    gregorian_string_to_jd,
    gregorian_string_to_gregorian_string,
    gregorian_string_to_calendar_fields,
    calendar_fields_to_gregorian_string,
)

__all__ = [
    "TimeKernelError",
    "MalformedDateString",
    "InvalidCalendarField",
    "DateBeforeLeapSecondHistory",
    "LeapSecondTableUnavailable",
    "TimeScale",
    "convert_scale",
    "jd_to_gregorian_string",
    "gregorian_string_to_jd",
    "gregorian_string_to_gregorian_string",
    "gregorian_string_to_calendar_fields",
    "calendar_fields_to_gregorian_string",
]
