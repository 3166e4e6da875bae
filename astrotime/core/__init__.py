"""
Core time kernel modules.

Leap-second table, calendar arithmetic, timescale conversion and the
conversion facade built on them.
"""

from .errors import (
    TimeKernelError,
    MalformedDateString,
    InvalidCalendarField,
    DateBeforeLeapSecondHistory,
    LeapSecondTableUnavailable,
)
from .gregorian import GregorianDateTime, JulianDayParts, gregorian_to_jd, jd_to_gregorian
from .leapseconds import LeapSecondEntry, LeapSecondTable, offset_seconds
from .leapsource import load_leap_second_table, fetch_tai_utc_data
from .timescales import TimeScale, convert
from .time_kernel import (
    convert_scale,
    jd_to_gregorian_string,
    gregorian_string_to_jd,
    gregorian_string_to_gregorian_string,
    gregorian_string_to_calendar_fields,
    calendar_fields_to_gregorian_string,
    get_leap_second_table,
    reload_leap_second_table,
)

__all__ = [
    "TimeKernelError",
    "MalformedDateString",
    "InvalidCalendarField",
    "DateBeforeLeapSecondHistory",
    "LeapSecondTableUnavailable",
    "GregorianDateTime",
    "JulianDayParts",
    "gregorian_to_jd",
    "jd_to_gregorian",
    "LeapSecondEntry",
    "LeapSecondTable",
    "offset_seconds",
    "load_leap_second_table",
    "fetch_tai_utc_data",
    "TimeScale",
    "convert",
    "convert_scale",
    "jd_to_gregorian_string",
    "gregorian_string_to_jd",
    "gregorian_string_to_gregorian_string",
    "gregorian_string_to_calendar_fields",
    "calendar_fields_to_gregorian_string",
    "get_leap_second_table",
    "reload_leap_second_table",
]
