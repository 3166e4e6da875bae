"""
pytest configuration and shared fixtures for astrotime tests.
"""

import pytest

from astrotime.core import time_kernel
from astrotime.core.leapseconds import builtin_leap_second_table
from astrotime.core.leapsource import parse_tai_utc_dat


# ============================================================================
# TEST DATA FIXTURES
# ============================================================================

SAMPLE_TAI_UTC_DAT = """\
 1961 JAN  1 =JD 2437300.5  TAI-UTC=   1.4228180 S + (MJD - 37300.) X 0.001296 S
 1961 AUG  1 =JD 2437512.5  TAI-UTC=   1.3728180 S + (MJD - 37300.) X 0.001296 S
 1962 JAN  1 =JD 2437665.5  TAI-UTC=   1.8458580 S + (MJD - 37665.) X 0.0011232S
 1972 JAN  1 =JD 2441317.5  TAI-UTC=  10.0       S + (MJD - 41317.) X 0.0      S
 1972 JUL  1 =JD 2441499.5  TAI-UTC=  11.0       S + (MJD - 41317.) X 0.0      S
 2015 JUL  1 =JD 2457204.5  TAI-UTC=  36.0       S + (MJD - 41317.) X 0.0      S
 2017 JAN  1 =JD 2457754.5  TAI-UTC=  37.0       S + (MJD - 41317.) X 0.0      S
"""


@pytest.fixture
def sample_dat_text():
    """A few USNO tai-utc.dat records spanning the drift and step eras."""
    return SAMPLE_TAI_UTC_DAT


@pytest.fixture
def sample_table():
    return parse_tai_utc_dat(SAMPLE_TAI_UTC_DAT, source="sample")


@pytest.fixture
def builtin_table():
    """The USNO history bundled with the package."""
    return builtin_leap_second_table()


@pytest.fixture
def sample_dat_file(tmp_path):
    path = tmp_path / "tai-utc.dat"
    path.write_text(SAMPLE_TAI_UTC_DAT, encoding="utf-8")
    return path


# ============================================================================
# ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def fresh_default_table(monkeypatch):
    """Every test starts without a cached default table or ASTROTIME_* overrides."""
    for name in (
        "ASTROTIME_TAI_UTC_FILE",
        "ASTROTIME_TAI_UTC_URL",
        "ASTROTIME_STALE_AFTER_DAYS",
        "ASTROTIME_FETCH_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(time_kernel, "_default_table", None)
    yield
