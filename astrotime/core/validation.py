# astrotime/core/validation.py
# -----------------------------------------------------------------------------
# Cross-validation against IAU SOFA/ERFA
#
# Recomputes each quantity the kernel derives for a UTC instant with pyERFA
# and reports the differences:
#
#   TAI − UTC      erfa.dat      (leap-second table, incl. pre-1972 drift)
#   JD(TT)         erfa.utctai → erfa.taitt
#   TDB − TT       erfa.dtdb     (full series, geocentric)
#   calendar       erfa.jd2cal
#
# The kernel's TDB − TT is a two-term approximation, hence the looser
# tolerance on that line.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import math
import warnings as py_warnings
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple

import erfa  # pyERFA - SOFA/ERFA reference implementation

from .config import KernelConfig
from .gregorian import MS_PER_DAY, jd_to_gregorian, jdn_from_date
from .leapseconds import LeapSecondTable, offset_seconds
from .time_kernel import get_leap_second_table
from .timescales import SECONDS_PER_DAY, TimeScale, convert, tdb_minus_tt_seconds

__all__ = [
    "VALIDATION_TOLERANCES",
    "ValidationReport",
    "split_jd",
    "cross_validate",
]

log = logging.getLogger(__name__)

VALIDATION_TOLERANCES: Dict[str, float] = {
    "tai_utc_seconds": 1e-6,
    "tt_seconds": 1e-4,       # single-float JD carries ~20 µs of rounding
    "tdb_tt_seconds": 1e-4,
    "calendar_seconds": 1e-3,
}


@dataclass(frozen=True)
class ValidationReport:
    """Differences between the kernel and ERFA at one UTC instant."""
    reference_source: str
    jd_utc: float
    tai_utc_difference_seconds: float
    tt_difference_seconds: float
    tdb_tt_difference_seconds: float
    calendar_difference_seconds: float
    passed_tolerance: bool
    validation_timestamp: str
    notes: List[str] = field(default_factory=list)


def split_jd(jd: float) -> Tuple[float, float]:
    """
    Split a Julian Day at the preceding midnight for ERFA's two-part form.

    jd1 ends in .5 and jd2 lies in [0, 1).
    """
    shifted = jd + 0.5
    jd1 = math.floor(shifted)
    jd2 = shifted - jd1
    return float(jd1) - 0.5, float(jd2)


def _differences(jd_utc: float, table: LeapSecondTable) -> Tuple[Dict[str, float], List[str]]:
    notes: List[str] = []
    ours_dat = offset_seconds(table, jd_utc)
    ours_tt = convert(jd_utc, TimeScale.UTC, TimeScale.TT, table)
    ours_dtdb = tdb_minus_tt_seconds(ours_tt)
    ours_cal = jd_to_gregorian(jd_utc)

    utc1, utc2 = split_jd(jd_utc)
    with py_warnings.catch_warnings(record=True) as caught:
        py_warnings.simplefilter("always", erfa.ErfaWarning)
        iy, im, iday, fd = erfa.jd2cal(utc1, utc2)
        dat = float(erfa.dat(iy, im, iday, fd))
        tai1, tai2 = erfa.utctai(utc1, utc2)
        tt1, tt2 = erfa.taitt(tai1, tai2)
        dtdb = float(erfa.dtdb(tt1, tt2, float(fd), 0.0, 0.0, 0.0))
    notes.extend(f"erfa_warning: {w.message}" for w in caught)

    erfa_day_ms = (
        jdn_from_date(int(iy), int(im), int(iday))
        - jdn_from_date(ours_cal.year, ours_cal.month, ours_cal.day)
    ) * MS_PER_DAY + float(fd) * MS_PER_DAY
    calendar_diff = abs(erfa_day_ms - ours_cal.millisecond_of_day) / 1000.0

    return {
        "tai_utc_seconds": abs(ours_dat - dat),
        "tt_seconds": abs(((ours_tt - float(tt1)) - float(tt2)) * SECONDS_PER_DAY),
        "tdb_tt_seconds": abs(ours_dtdb - dtdb),
        "calendar_seconds": calendar_diff,
    }, notes


def cross_validate(
    jd_utc: float,
    *,
    table: Optional[LeapSecondTable] = None,
    tolerances: Optional[Mapping[str, float]] = None,
    config: Optional[KernelConfig] = None,
) -> ValidationReport:
    """
    Compare the kernel's conversions for jd_utc with ERFA.

    Args:
        jd_utc: Julian Day in UTC
        table: Leap-second table (default: process table)
        tolerances: Overrides for VALIDATION_TOLERANCES
        config: Staleness threshold source (default: from environment)

    Returns:
        ValidationReport; staleness and ERFA warnings are listed in notes

    Raises:
        DateBeforeLeapSecondHistory: jd_utc precedes the table
    """
    table = table if table is not None else get_leap_second_table()
    config = config or KernelConfig.from_env()
    limits = {**VALIDATION_TOLERANCES, **(tolerances or {})}

    notes: List[str] = []
    try:
        diffs, erfa_notes = _differences(jd_utc, table)
        notes.extend(erfa_notes)
    except erfa.ErfaError as e:
        diffs = {key: math.inf for key in VALIDATION_TOLERANCES}
        notes.append(f"erfa_error: {e}")

    failed = [key for key, value in diffs.items() if not value <= limits[key]]
    notes.extend(f"{key}_exceeds_tolerance" for key in failed)

    if table.is_stale(jd_utc, config.stale_after_days):
        notes.append(f"leap_second_table_stale_{table.staleness_days(jd_utc):.0f}_days")

    report = ValidationReport(
        reference_source=f"erfa {getattr(erfa, '__version__', 'unknown')}",
        jd_utc=jd_utc,
        tai_utc_difference_seconds=diffs["tai_utc_seconds"],
        tt_difference_seconds=diffs["tt_seconds"],
        tdb_tt_difference_seconds=diffs["tdb_tt_seconds"],
        calendar_difference_seconds=diffs["calendar_seconds"],
        passed_tolerance=not failed,
        validation_timestamp=datetime.now(timezone.utc).isoformat(),
        notes=notes,
    )
    if not report.passed_tolerance:
        log.warning("Cross-validation failed at JD(UTC) %.9f: %s", jd_utc, report.notes)
    return report
