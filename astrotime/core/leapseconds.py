# astrotime/core/leapseconds.py
# -----------------------------------------------------------------------------
# Leap-Second Table (TAI - UTC)
#
# The table is a step function in UTC: each record governs from its
# effective JD (inclusive) until the next record's effective JD (exclusive).
# Records before 1972 also carry a linear drift in seconds per day measured
# from a reference MJD; later records are pure one-second steps.
#
# Public API:
#   LeapSecondEntry, LeapSecondTable
#   offset_seconds(table, jd_utc) -> float
#   builtin_leap_second_table() -> LeapSecondTable
#
# Policy for dates before the first record: DateBeforeLeapSecondHistory.
# Dates after the last record keep the last record's offset.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List, Tuple

from .errors import DateBeforeLeapSecondHistory, LeapSecondTableUnavailable

__all__ = [
    "MJD_OFFSET",
    "BUILTIN_TAI_UTC",
    "LeapSecondEntry",
    "LeapSecondTable",
    "offset_seconds",
    "jd_to_mjd",
    "mjd_to_jd",
    "builtin_leap_second_table",
]

log = logging.getLogger(__name__)

MJD_OFFSET = 2400000.5

# ─────────────────────────────────────────────────────────────────────────────
# Built-in USNO tai-utc.dat (through 2017-01-01)
# Format: (label, effective JD, TAI-UTC base seconds, reference MJD, drift s/day)
# ─────────────────────────────────────────────────────────────────────────────

BUILTIN_TAI_UTC: Tuple[Tuple[str, float, float, float, float], ...] = (
    ("1961 JAN  1", 2437300.5, 1.4228180, 37300.0, 0.001296),
    ("1961 AUG  1", 2437512.5, 1.3728180, 37300.0, 0.001296),
    ("1962 JAN  1", 2437665.5, 1.8458580, 37665.0, 0.0011232),
    ("1963 NOV  1", 2438334.5, 1.9458580, 37665.0, 0.0011232),
    ("1964 JAN  1", 2438395.5, 3.2401300, 38761.0, 0.001296),
    ("1964 APR  1", 2438486.5, 3.3401300, 38761.0, 0.001296),
    ("1964 SEP  1", 2438639.5, 3.4401300, 38761.0, 0.001296),
    ("1965 JAN  1", 2438761.5, 3.5401300, 38761.0, 0.001296),
    ("1965 MAR  1", 2438820.5, 3.6401300, 38761.0, 0.001296),
    ("1965 JUL  1", 2438942.5, 3.7401300, 38761.0, 0.001296),
    ("1965 SEP  1", 2439004.5, 3.8401300, 38761.0, 0.001296),
    ("1966 JAN  1", 2439126.5, 4.3131700, 39126.0, 0.002592),
    ("1968 FEB  1", 2439887.5, 4.2131700, 39126.0, 0.002592),
    ("1972 JAN  1", 2441317.5, 10.0, 41317.0, 0.0),
    ("1972 JUL  1", 2441499.5, 11.0, 41317.0, 0.0),
    ("1973 JAN  1", 2441683.5, 12.0, 41317.0, 0.0),
    ("1974 JAN  1", 2442048.5, 13.0, 41317.0, 0.0),
    ("1975 JAN  1", 2442413.5, 14.0, 41317.0, 0.0),
    ("1976 JAN  1", 2442778.5, 15.0, 41317.0, 0.0),
    ("1977 JAN  1", 2443144.5, 16.0, 41317.0, 0.0),
    ("1978 JAN  1", 2443509.5, 17.0, 41317.0, 0.0),
    ("1979 JAN  1", 2443874.5, 18.0, 41317.0, 0.0),
    ("1980 JAN  1", 2444239.5, 19.0, 41317.0, 0.0),
    ("1981 JUL  1", 2444786.5, 20.0, 41317.0, 0.0),
    ("1982 JUL  1", 2445151.5, 21.0, 41317.0, 0.0),
    ("1983 JUL  1", 2445516.5, 22.0, 41317.0, 0.0),
    ("1985 JUL  1", 2446247.5, 23.0, 41317.0, 0.0),
    ("1988 JAN  1", 2447161.5, 24.0, 41317.0, 0.0),
    ("1990 JAN  1", 2447892.5, 25.0, 41317.0, 0.0),
    ("1991 JAN  1", 2448257.5, 26.0, 41317.0, 0.0),
    ("1992 JUL  1", 2448804.5, 27.0, 41317.0, 0.0),
    ("1993 JUL  1", 2449169.5, 28.0, 41317.0, 0.0),
    ("1994 JUL  1", 2449534.5, 29.0, 41317.0, 0.0),
    ("1996 JAN  1", 2450083.5, 30.0, 41317.0, 0.0),
    ("1997 JUL  1", 2450630.5, 31.0, 41317.0, 0.0),
    ("1999 JAN  1", 2451179.5, 32.0, 41317.0, 0.0),
    ("2006 JAN  1", 2453736.5, 33.0, 41317.0, 0.0),
    ("2009 JAN  1", 2454832.5, 34.0, 41317.0, 0.0),
    ("2012 JUL  1", 2456109.5, 35.0, 41317.0, 0.0),
    ("2015 JUL  1", 2457204.5, 36.0, 41317.0, 0.0),
    ("2017 JAN  1", 2457754.5, 37.0, 41317.0, 0.0),
)


def jd_to_mjd(jd: float) -> float:
    return jd - MJD_OFFSET


def mjd_to_jd(mjd: float) -> float:
    return mjd + MJD_OFFSET

# ─────────────────────────────────────────────────────────────────────────────
# Data Structures
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LeapSecondEntry:
    """One record of the TAI-UTC history."""
    effective_jd: float
    base_offset_seconds: float
    base_mjd_reference: float = 0.0
    drift_rate_seconds_per_day: float = 0.0

    @property
    def effective_mjd(self) -> float:
        return jd_to_mjd(self.effective_jd)

    @property
    def has_drift(self) -> bool:
        return self.drift_rate_seconds_per_day != 0.0

    def offset_at(self, jd_utc: float) -> float:
        """TAI-UTC in seconds at jd_utc, assuming this record governs it."""
        if not self.has_drift:
            return self.base_offset_seconds
        return self.base_offset_seconds + self.drift_rate_seconds_per_day * (
            jd_to_mjd(jd_utc) - self.base_mjd_reference
        )


@dataclass(frozen=True)
class LeapSecondTable:
    """Immutable, ascending sequence of LeapSecondEntry records.

    Safe to share between threads: nothing mutates a table after
    construction. Refreshing means building a new table.
    """
    entries: Tuple[LeapSecondEntry, ...]
    source: str = "unknown"
    _effective_jds: Tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        entries = tuple(self.entries)
        if not entries:
            raise LeapSecondTableUnavailable(
                f"Leap-second table from {self.source} is empty", source=self.source
            )
        jds = tuple(e.effective_jd for e in entries)
        for previous, current in zip(jds, jds[1:]):
            if not current > previous:
                raise LeapSecondTableUnavailable(
                    f"Leap-second table from {self.source} is not strictly ascending "
                    f"at JD {current}",
                    source=self.source,
                    jd=current,
                )
        object.__setattr__(self, "entries", entries)
        object.__setattr__(self, "_effective_jds", jds)

    @classmethod
    def from_entries(cls, entries: Iterable[LeapSecondEntry], source: str = "unknown") -> "LeapSecondTable":
        """Build a table from records in any order."""
        ordered: List[LeapSecondEntry] = sorted(entries, key=lambda e: e.effective_jd)
        return cls(tuple(ordered), source=source)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def first_jd(self) -> float:
        return self._effective_jds[0]

    @property
    def last_jd(self) -> float:
        return self._effective_jds[-1]

    def entry_for(self, jd_utc: float) -> LeapSecondEntry:
        """Last record whose effective JD is <= jd_utc."""
        index = bisect_right(self._effective_jds, jd_utc) - 1
        if index < 0:
            raise DateBeforeLeapSecondHistory(jd_utc, self.first_jd)
        return self.entries[index]

    def offset_seconds(self, jd_utc: float) -> float:
        return self.entry_for(jd_utc).offset_at(jd_utc)

    def staleness_days(self, jd_utc: float) -> float:
        """Days elapsed since the last recorded change (negative inside history)."""
        return jd_utc - self.last_jd

    def is_stale(self, jd_utc: float, after_days: float) -> bool:
        return self.staleness_days(jd_utc) >= after_days


def offset_seconds(table: LeapSecondTable, jd_utc: float) -> float:
    """
    TAI - UTC in seconds valid at jd_utc.

    Args:
        table: Leap-second history
        jd_utc: Julian Day expressed in UTC

    Returns:
        Offset in seconds (UTC is behind TAI by this amount)

    Raises:
        LeapSecondTableUnavailable: table is None or empty
        DateBeforeLeapSecondHistory: jd_utc precedes the first record
    """
    if table is None or len(table) == 0:
        raise LeapSecondTableUnavailable("No leap-second table loaded")
    entry = table.entry_for(jd_utc)
    value = entry.offset_at(jd_utc)
    log.debug("TAI-UTC at JD %.9f = %.7f s (entry JD %.1f)", jd_utc, value, entry.effective_jd)
    return value


@lru_cache(maxsize=1)
def builtin_leap_second_table() -> LeapSecondTable:
    """The USNO history bundled with the package, through 2017-01-01."""
    return LeapSecondTable(
        tuple(
            LeapSecondEntry(jd, offset, mjd_ref, rate)
            for _, jd, offset, mjd_ref, rate in BUILTIN_TAI_UTC
        ),
        source="builtin",
    )
