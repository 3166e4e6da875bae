# astrotime/core/time_kernel.py
# -----------------------------------------------------------------------------
# Time Kernel - Conversion Facade
#
# Combines the Timescale Converter (scale shifts) with the Calendar Converter
# (representation shifts). Scales may be given as TimeScale members or their
# names ("utc", "TT", ...).
#
# The process-wide default leap-second table is loaded on first use from
# ASTROTIME_TAI_UTC_FILE, or from the built-in USNO copy, and is only ever
# replaced wholesale by reload_leap_second_table().
#
# Public API:
#   convert_scale(jd, from, to) -> float
#   jd_to_gregorian_string(jd, from, to) -> str
#   gregorian_string_to_jd(s, from, to) -> float
#   gregorian_string_to_gregorian_string(s, from, to) -> str
#   gregorian_string_to_calendar_fields(s) -> (y, m, d, h, mi, s)
#   calendar_fields_to_gregorian_string(y, m, d, h, mi, s) -> str
#   get_leap_second_table() / reload_leap_second_table()
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import threading
from typing import Optional, Tuple, Union

from .config import KernelConfig
from .gregorian import (
    GregorianDateTime,
    format_gregorian,
    gregorian_to_jd,
    jd_to_gregorian,
    parse_gregorian,
)
from .leapseconds import LeapSecondTable, builtin_leap_second_table
from .leapsource import load_leap_second_table
from .timescales import TimeScale, convert

__all__ = [
    "ScaleLike",
    "convert_scale",
    "jd_to_gregorian_string",
    "gregorian_string_to_jd",
    "gregorian_string_to_gregorian_string",
    "gregorian_string_to_calendar_fields",
    "calendar_fields_to_gregorian_string",
    "get_leap_second_table",
    "reload_leap_second_table",
]

log = logging.getLogger(__name__)

ScaleLike = Union[TimeScale, str]
CalendarFields = Tuple[int, int, int, int, int, float]

# ───────────────────────────── Default Leap-Second Table ─────────────────────────────

_table_lock = threading.Lock()
_default_table: Optional[LeapSecondTable] = None


def _load_default_table(config: KernelConfig) -> LeapSecondTable:
    if config.tai_utc_file:
        table = load_leap_second_table(config.tai_utc_file)
    else:
        table = builtin_leap_second_table()
    log.info(
        "Leap-second table from %s: %d records, JD %.1f to %.1f",
        table.source, len(table), table.first_jd, table.last_jd,
    )
    return table


def get_leap_second_table() -> LeapSecondTable:
    """Process-wide leap-second table, loaded once on first use."""
    global _default_table
    table = _default_table
    if table is None:
        with _table_lock:
            if _default_table is None:
                _default_table = _load_default_table(KernelConfig.from_env())
            table = _default_table
    return table


def reload_leap_second_table(path: Optional[str] = None) -> LeapSecondTable:
    """
    Build a fresh default table and swap it in.

    Readers holding the previous table keep a consistent view; the new one
    is fully parsed before it becomes visible.

    Args:
        path: Table file to load; None re-reads the environment configuration
    """
    global _default_table
    if path is not None:
        table = load_leap_second_table(path)
    else:
        table = _load_default_table(KernelConfig.from_env())
    with _table_lock:
        _default_table = table
    return table


def _resolve(table: Optional[LeapSecondTable]) -> LeapSecondTable:
    return table if table is not None else get_leap_second_table()

# ───────────────────────────── Scale Conversions ─────────────────────────────

def convert_scale(
    jd: float,
    from_scale: ScaleLike,
    to_scale: ScaleLike,
    *,
    table: Optional[LeapSecondTable] = None,
) -> float:
    """
    Julian Day in from_scale -> Julian Day in to_scale.

    Raises:
        ValueError: unknown scale name
        InvalidCalendarField: non-finite jd
        DateBeforeLeapSecondHistory: UTC involved and jd precedes the table
        LeapSecondTableUnavailable: UTC involved and no table can be loaded
    """
    src = TimeScale.parse(from_scale)
    dst = TimeScale.parse(to_scale)
    needs_table = src is not dst and TimeScale.UTC in (src, dst)
    return convert(jd, src, dst, _resolve(table) if needs_table else table)


def jd_to_gregorian_string(
    jd: float,
    from_scale: ScaleLike,
    to_scale: ScaleLike,
    *,
    table: Optional[LeapSecondTable] = None,
) -> str:
    """Julian Day in from_scale -> 'YYYY-MM-DDThh:mm:ss.mmm' in to_scale."""
    shifted = convert_scale(jd, from_scale, to_scale, table=table)
    return format_gregorian(jd_to_gregorian(shifted))


def gregorian_string_to_jd(
    value: str,
    from_scale: ScaleLike,
    to_scale: ScaleLike,
    *,
    table: Optional[LeapSecondTable] = None,
) -> float:
    """'YYYY-MM-DDThh:mm:ss.mmm' in from_scale -> Julian Day in to_scale."""
    jd = gregorian_to_jd(parse_gregorian(value))
    return convert_scale(jd, from_scale, to_scale, table=table)


def gregorian_string_to_gregorian_string(
    value: str,
    from_scale: ScaleLike,
    to_scale: ScaleLike,
    *,
    table: Optional[LeapSecondTable] = None,
) -> str:
    jd = gregorian_string_to_jd(value, from_scale, to_scale, table=table)
    return format_gregorian(jd_to_gregorian(jd))

# ───────────────────────────── Calendar Fields ─────────────────────────────

def gregorian_string_to_calendar_fields(value: str) -> CalendarFields:
    """'YYYY-MM-DDThh:mm:ss.mmm' -> (year, month, day, hour, minute, second)"""
    return parse_gregorian(value).to_tuple()


def calendar_fields_to_gregorian_string(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: float = 0.0,
) -> str:
    """(year, month, day, hour, minute, second) -> 'YYYY-MM-DDThh:mm:ss.mmm'"""
    return format_gregorian(GregorianDateTime(year, month, day, hour, minute, second))
