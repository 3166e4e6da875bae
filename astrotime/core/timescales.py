# astrotime/core/timescales.py
# -----------------------------------------------------------------------------
# Timescale Converter (TAI / UTC / TT / TDB)
#
# The four scales form a fixed chain
#
#     UTC ←→ TAI ←→ TT ←→ TDB
#
#   • TAI − UTC : leap-second table, evaluated at the JD in UTC
#   • TT  − TAI : 32.184 s exactly
#   • TDB − TT  : 0.001658 sin g + 0.000014 sin 2g, evaluated at the JD in TT
#
# A conversion walks the chain one hop at a time, so every offset is looked
# up against the JD already expressed in the scale it is defined on. Inverse
# hops whose offset depends on the target scale (TAI→UTC, TDB→TT) are solved
# by fixed-point iteration.
#
# Public API:
#   TimeScale
#   convert(jd, from_scale, to_scale, table) -> float
#   scale_path(from_scale, to_scale) -> tuple of TimeScale
#   tdb_minus_tt_seconds(jd_tt) -> float
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Union

from .errors import InvalidCalendarField
from .leapseconds import LeapSecondTable, offset_seconds

__all__ = [
    "TimeScale",
    "SECONDS_PER_DAY",
    "TT_MINUS_TAI_SECONDS",
    "JD_J2000",
    "convert",
    "scale_path",
    "julian_centuries",
    "tdb_minus_tt_seconds",
]

log = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0
DAYS_PER_CENTURY = 36525.0
JD_J2000 = 2451545.0
TT_MINUS_TAI_SECONDS = 32.184

# Mean anomaly of the Earth, radians: g = G0 + G1 * T
_G0 = 6.24004077
_G1 = 628.3019551
_TWO_PI = 2.0 * math.pi

# Passes for the inverse hops; the offsets vary by far less than a
# millisecond per second of argument, so two passes reach float precision.
_FIXED_POINT_PASSES = 2
_CONVERGENCE_DAYS = 1e-3 / SECONDS_PER_DAY


class TimeScale(Enum):
    """The four supported astronomical timescales."""
    TAI = "TAI"
    UTC = "UTC"
    TDB = "TDB"
    TT = "TT"

    @classmethod
    def parse(cls, value: Union["TimeScale", str]) -> "TimeScale":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ValueError(
            f"Unknown timescale {value!r}: expected one of {', '.join(s.value for s in cls)}"
        )

# ───────────────────────────── Offset Models ─────────────────────────────

def julian_centuries(jd_tt: float) -> float:
    """T = (JD_TT - 2451545.0) / 36525"""
    return (jd_tt - JD_J2000) / DAYS_PER_CENTURY


def tdb_minus_tt_seconds(jd_tt: float) -> float:
    """
    Periodic TDB - TT in seconds (two-term approximation, ~30 µs accuracy
    around the present era).
    """
    g = math.fmod(_G0 + _G1 * julian_centuries(jd_tt), _TWO_PI)
    return 0.001658 * math.sin(g) + 0.000014 * math.sin(2.0 * g)

# ───────────────────────────── Single Hops ─────────────────────────────

Hop = Callable[[float, Optional[LeapSecondTable]], float]


def _utc_to_tai(jd_utc: float, table: Optional[LeapSecondTable]) -> float:
    return jd_utc + offset_seconds(table, jd_utc) / SECONDS_PER_DAY


def _tai_to_utc(jd_tai: float, table: Optional[LeapSecondTable]) -> float:
    jd_utc = jd_tai - offset_seconds(table, jd_tai) / SECONDS_PER_DAY
    for _ in range(_FIXED_POINT_PASSES):
        jd_utc = jd_tai - offset_seconds(table, jd_utc) / SECONDS_PER_DAY
    check = jd_tai - offset_seconds(table, jd_utc) / SECONDS_PER_DAY
    if abs(check - jd_utc) > _CONVERGENCE_DAYS:
        # Inside an inserted leap second: no UTC Julian Day exists, pin to the step.
        return table.entry_for(max(jd_utc, check)).effective_jd
    return jd_utc


def _tai_to_tt(jd_tai: float, table: Optional[LeapSecondTable]) -> float:
    return jd_tai + TT_MINUS_TAI_SECONDS / SECONDS_PER_DAY


def _tt_to_tai(jd_tt: float, table: Optional[LeapSecondTable]) -> float:
    return jd_tt - TT_MINUS_TAI_SECONDS / SECONDS_PER_DAY


def _tt_to_tdb(jd_tt: float, table: Optional[LeapSecondTable]) -> float:
    return jd_tt + tdb_minus_tt_seconds(jd_tt) / SECONDS_PER_DAY


def _tdb_to_tt(jd_tdb: float, table: Optional[LeapSecondTable]) -> float:
    jd_tt = jd_tdb - tdb_minus_tt_seconds(jd_tdb) / SECONDS_PER_DAY
    for _ in range(_FIXED_POINT_PASSES):
        jd_tt = jd_tdb - tdb_minus_tt_seconds(jd_tt) / SECONDS_PER_DAY
    return jd_tt


_TAI, _UTC, _TT, _TDB = TimeScale.TAI, TimeScale.UTC, TimeScale.TT, TimeScale.TDB

_HOPS: Dict[Tuple[TimeScale, TimeScale], Hop] = {
    (_UTC, _TAI): _utc_to_tai,
    (_TAI, _UTC): _tai_to_utc,
    (_TAI, _TT): _tai_to_tt,
    (_TT, _TAI): _tt_to_tai,
    (_TT, _TDB): _tt_to_tdb,
    (_TDB, _TT): _tdb_to_tt,
}

# Every ordered pair of distinct scales, spelled out.
_PATHS: Dict[Tuple[TimeScale, TimeScale], Tuple[TimeScale, ...]] = {
    (_TAI, _UTC): (_TAI, _UTC),
    (_TAI, _TT): (_TAI, _TT),
    (_TAI, _TDB): (_TAI, _TT, _TDB),
    (_UTC, _TAI): (_UTC, _TAI),
    (_UTC, _TT): (_UTC, _TAI, _TT),
    (_UTC, _TDB): (_UTC, _TAI, _TT, _TDB),
    (_TT, _TAI): (_TT, _TAI),
    (_TT, _UTC): (_TT, _TAI, _UTC),
    (_TT, _TDB): (_TT, _TDB),
    (_TDB, _TT): (_TDB, _TT),
    (_TDB, _TAI): (_TDB, _TT, _TAI),
    (_TDB, _UTC): (_TDB, _TT, _TAI, _UTC),
}

# ───────────────────────────── Public API ─────────────────────────────

def scale_path(from_scale: TimeScale, to_scale: TimeScale) -> Tuple[TimeScale, ...]:
    """Scales visited when converting from_scale -> to_scale, endpoints included."""
    if from_scale is to_scale:
        return (from_scale,)
    return _PATHS[(from_scale, to_scale)]


def convert(
    jd: float,
    from_scale: TimeScale,
    to_scale: TimeScale,
    table: Optional[LeapSecondTable] = None,
) -> float:
    """
    Convert a Julian Day between timescales.

    Args:
        jd: Julian Day expressed in from_scale
        from_scale: Scale of the input
        to_scale: Scale of the result
        table: Leap-second history, consulted only on a UTC hop

    Returns:
        Julian Day expressed in to_scale

    Raises:
        InvalidCalendarField: jd is not finite (same as jd_to_gregorian)
        LeapSecondTableUnavailable: UTC hop with no table
        DateBeforeLeapSecondHistory: UTC hop before the first table entry
    """
    if not math.isfinite(jd):
        raise InvalidCalendarField("jd", jd, "must be finite")
    if from_scale is to_scale:
        return jd

    path = _PATHS[(from_scale, to_scale)]
    value = jd
    for here, there in zip(path, path[1:]):
        value = _HOPS[(here, there)](value, table)
    log.debug("JD %.9f %s -> %.9f %s", jd, from_scale.value, value, to_scale.value)
    return value
