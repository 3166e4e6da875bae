# astrotime/core/gregorian.py
# -----------------------------------------------------------------------------
# Calendar Converter: Julian Day <-> proleptic Gregorian date-time
#
# Pure integer arithmetic (Fliegel & Van Flandern, 1968) for the date part;
# the time of day is carried as an integer count of milliseconds so that
# rounding cascades (59.9995 s -> next minute -> next hour -> next day) are
# handled in one place. No timescale awareness.
#
# String layout: YYYY-MM-DDThh:mm:ss.mmm
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Tuple

from .errors import InvalidCalendarField, MalformedDateString

__all__ = [
    "GregorianDateTime",
    "JulianDayParts",
    "MIN_YEAR",
    "MAX_YEAR",
    "is_leap_year",
    "days_in_month",
    "jdn_from_date",
    "date_from_jdn",
    "jd_to_gregorian",
    "gregorian_to_jd",
    "parse_gregorian",
    "format_gregorian",
]

MIN_YEAR = 1
MAX_YEAR = 9999

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR
_MS_AT_NOON = MS_PER_DAY // 2
SECONDS_PER_DAY = 86400

_GREGORIAN_RE = re.compile(
    r"^\s*(?P<y>\d{4})-(?P<mo>\d{2})-(?P<d>\d{2})"
    r"T(?P<h>\d{2}):(?P<mi>\d{2}):(?P<s>\d{2})(?:\.(?P<f>\d{1,9}))?\s*$"
)

_MONTH_DAYS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _MONTH_DAYS[month - 1]


def _seconds_to_ms(second: float) -> int:
    return int(round(second * MS_PER_SECOND))


def _require_integer(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidCalendarField(name, value, f"must be an integer, got {type(value).__name__}")

# ───────────────────────────── Data Structures ─────────────────────────────

@dataclass(frozen=True)
class GregorianDateTime:
    """Civil date-time fields; seconds are quantized to the millisecond."""
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: float = 0.0

    def __post_init__(self) -> None:
        for name in ("year", "month", "day", "hour", "minute"):
            _require_integer(name, getattr(self, name))
        if isinstance(self.second, bool) or not isinstance(self.second, numbers.Real):
            raise InvalidCalendarField(
                "second", self.second, f"must be a real number, got {type(self.second).__name__}"
            )
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise InvalidCalendarField("year", self.year, f"must be {MIN_YEAR}-{MAX_YEAR}")
        if not 1 <= self.month <= 12:
            raise InvalidCalendarField("month", self.month, "must be 1-12")
        dim = days_in_month(self.year, self.month)
        if not 1 <= self.day <= dim:
            raise InvalidCalendarField(
                "day", self.day, f"must be 1-{dim} for {self.year:04d}-{self.month:02d}"
            )
        if not 0 <= self.hour <= 23:
            raise InvalidCalendarField("hour", self.hour, "must be 0-23")
        if not 0 <= self.minute <= 59:
            raise InvalidCalendarField("minute", self.minute, "must be 0-59")
        if not math.isfinite(self.second):
            raise InvalidCalendarField("second", self.second, "must be finite")
        ms = _seconds_to_ms(self.second)
        if not 0 <= ms < 60 * MS_PER_SECOND:
            raise InvalidCalendarField("second", self.second, "must be in [0, 60) after rounding to ms")
        object.__setattr__(self, "second", ms / MS_PER_SECOND)

    @property
    def millisecond_of_day(self) -> int:
        return (
            self.hour * MS_PER_HOUR
            + self.minute * MS_PER_MINUTE
            + _seconds_to_ms(self.second)
        )

    def to_tuple(self) -> Tuple[int, int, int, int, int, float]:
        return (self.year, self.month, self.day, self.hour, self.minute, self.second)

    def __str__(self) -> str:
        return format_gregorian(self)

# ───────────────────────────── JDN Arithmetic ─────────────────────────────

def jdn_from_date(year: int, month: int, day: int) -> int:
    """Gregorian date -> Julian Day Number (proleptic Gregorian)."""
    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3
    return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def date_from_jdn(jdn: int) -> Tuple[int, int, int]:
    """Fliegel-Van Flandern inverse of jdn_from_date."""
    a = jdn + 32044
    b = (4 * a + 3) // 146097
    c = a - (146097 * b) // 4
    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153
    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + (m // 10)
    return year, month, day

# ───────────────────────────── JD <-> GregorianDateTime ─────────────────────────────

def jd_to_gregorian(jd: float) -> GregorianDateTime:
    """
    Julian Day -> GregorianDateTime, rounded to the nearest millisecond.

    A day fraction that rounds to 24:00:00.000 rolls over into the next
    calendar day.

    Raises:
        InvalidCalendarField: jd is not finite or falls outside years 1-9999
    """
    if not math.isfinite(jd):
        raise InvalidCalendarField("jd", jd, "must be finite")

    shifted = jd + 0.5
    jdn = math.floor(shifted)
    return _from_jdn_and_ms(int(jdn), int(round((shifted - jdn) * MS_PER_DAY)))


def _from_jdn_and_ms(jdn: int, ms_of_day: int) -> GregorianDateTime:
    # ms_of_day may reach one full day after rounding; carry it into the date
    if ms_of_day >= MS_PER_DAY:
        jdn += 1
        ms_of_day -= MS_PER_DAY
    year, month, day = date_from_jdn(jdn)
    hour, ms = divmod(ms_of_day, MS_PER_HOUR)
    minute, ms = divmod(ms, MS_PER_MINUTE)
    return GregorianDateTime(year, month, day, hour, minute, ms / MS_PER_SECOND)


def gregorian_to_jd(dt: GregorianDateTime) -> float:
    """GregorianDateTime -> Julian Day (JD .0 is noon, JD .5 is midnight)."""
    jdn = jdn_from_date(dt.year, dt.month, dt.day)
    return jdn + (dt.millisecond_of_day - _MS_AT_NOON) / MS_PER_DAY

# ───────────────────────────── Day / Second Split ─────────────────────────────

@dataclass(frozen=True)
class JulianDayParts:
    """A non-negative Julian Day split into whole days, whole seconds of day and a fraction."""
    whole_days: int
    whole_seconds: int
    fractional_seconds: float

    @classmethod
    def from_jd(cls, jd: float) -> "JulianDayParts":
        """
        Split jd at its integer part: 2.5 -> (2, 43200, 0.0).

        Raises:
            InvalidCalendarField: jd is negative or not finite
        """
        if not math.isfinite(jd) or jd < 0:
            raise InvalidCalendarField("jd", jd, "must be finite and non-negative")
        days = math.floor(jd)
        seconds = (jd - days) * SECONDS_PER_DAY
        whole = math.floor(seconds)
        if whole >= SECONDS_PER_DAY:
            days += 1
            whole -= SECONDS_PER_DAY
        return cls(int(days), int(whole), seconds - math.floor(seconds))

    @property
    def jd(self) -> float:
        return self.whole_days + (self.whole_seconds + self.fractional_seconds) / SECONDS_PER_DAY

    def to_tuple(self) -> Tuple[int, int, float]:
        return (self.whole_days, self.whole_seconds, self.fractional_seconds)

# ───────────────────────────── String Surface ─────────────────────────────

def parse_gregorian(value: str) -> GregorianDateTime:
    """
    Parse 'YYYY-MM-DDThh:mm:ss.mmm'.

    Up to nine fractional digits are accepted and rounded to milliseconds;
    a rounding that reaches 60 s carries into the minute, hour and day
    (23:59:59.9996 -> 00:00:00.000 of the next day).

    Raises:
        MalformedDateString: layout does not match
        InvalidCalendarField: a field is out of range, or the carry leaves year 9999
    """
    if not isinstance(value, str):
        raise MalformedDateString(value, f"expected str, got {type(value).__name__}")
    m = _GREGORIAN_RE.match(value)
    if not m:
        raise MalformedDateString(value)

    base = GregorianDateTime(
        int(m.group("y")),
        int(m.group("mo")),
        int(m.group("d")),
        int(m.group("h")),
        int(m.group("mi")),
    )
    whole = int(m.group("s"))
    if whole > 59:
        raise InvalidCalendarField("second", whole, "must be 0-59")

    frac = m.group("f") or ""
    frac_ms = round(Fraction(int(frac) * MS_PER_SECOND, 10 ** len(frac))) if frac else 0
    ms_of_day = base.millisecond_of_day + whole * MS_PER_SECOND + frac_ms
    return _from_jdn_and_ms(jdn_from_date(base.year, base.month, base.day), ms_of_day)


def format_gregorian(dt: GregorianDateTime) -> str:
    whole, ms = divmod(_seconds_to_ms(dt.second), MS_PER_SECOND)
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{whole:02d}.{ms:03d}"
    )
