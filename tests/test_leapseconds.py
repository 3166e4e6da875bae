"""
Unit tests for the TAI-UTC leap-second table.
"""

import dataclasses

import pytest

from astrotime.core.errors import (
    DateBeforeLeapSecondHistory,
    ErrorClass,
    LeapSecondTableUnavailable,
)
from astrotime.core.leapseconds import (
    BUILTIN_TAI_UTC,
    LeapSecondEntry,
    LeapSecondTable,
    jd_to_mjd,
    mjd_to_jd,
    offset_seconds,
)

JD_2017 = 2457754.5
JD_1972 = 2441317.5


class TestBuiltinTable:

    def test_covers_1961_to_2017(self, builtin_table):
        assert len(builtin_table) == len(BUILTIN_TAI_UTC) == 41
        assert builtin_table.first_jd == 2437300.5
        assert builtin_table.last_jd == JD_2017
        assert builtin_table.source == "builtin"

    def test_j2000_offset(self, builtin_table):
        assert offset_seconds(builtin_table, 2451545.0) == 32.0

    def test_post_1972_steps_are_whole_seconds_upward(self, builtin_table):
        modern = [e for e in builtin_table.entries if e.effective_jd >= JD_1972]
        assert modern[0].base_offset_seconds == 10.0
        for previous, current in zip(modern, modern[1:]):
            assert not current.has_drift
            assert current.base_offset_seconds - previous.base_offset_seconds == 1.0

    def test_table_is_immutable(self, builtin_table):
        with pytest.raises(dataclasses.FrozenInstanceError):
            builtin_table.source = "other"
        assert isinstance(builtin_table.entries, tuple)


class TestLookup:

    def test_exact_effective_jd_uses_new_entry(self, builtin_table):
        assert offset_seconds(builtin_table, JD_2017) == 37.0

    def test_just_before_effective_jd_uses_previous_entry(self, builtin_table):
        assert offset_seconds(builtin_table, JD_2017 - 1e-6) == 36.0

    def test_after_last_entry_keeps_last_offset(self, builtin_table):
        assert offset_seconds(builtin_table, 2470000.5) == 37.0

    def test_drift_at_reference_mjd(self, builtin_table):
        assert offset_seconds(builtin_table, 2437300.5) == pytest.approx(1.4228180, abs=1e-12)

    def test_drift_grows_linearly(self, builtin_table):
        # 100 days past MJD 37300 at 0.001296 s/day
        assert offset_seconds(builtin_table, 2437400.5) == pytest.approx(1.552418, abs=1e-9)

    def test_drift_with_reference_before_effective_date(self, builtin_table):
        # 1968 FEB 1 entry measures drift from MJD 39126
        assert offset_seconds(builtin_table, 2439887.5) == pytest.approx(6.185682, abs=1e-9)

    def test_drift_era_ends_at_1972(self, builtin_table):
        assert offset_seconds(builtin_table, JD_1972 - 0.1) == pytest.approx(9.8919828, abs=1e-7)
        assert offset_seconds(builtin_table, JD_1972) == 10.0

    def test_before_first_entry_is_an_error(self, builtin_table):
        with pytest.raises(DateBeforeLeapSecondHistory) as exc_info:
            offset_seconds(builtin_table, 2437300.0)
        err = exc_info.value
        assert isinstance(err, LookupError)
        assert err.error_class is ErrorClass.LEAP_SECOND_COVERAGE
        assert err.context == {"jd": 2437300.0, "first_jd": 2437300.5}

    def test_no_table(self):
        with pytest.raises(LeapSecondTableUnavailable):
            offset_seconds(None, 2451545.0)

    def test_entry_for(self, sample_table):
        entry = sample_table.entry_for(2450000.5)
        assert entry.effective_jd == 2441499.5
        assert entry.base_offset_seconds == 11.0


class TestConstruction:

    def test_empty_table_rejected(self):
        with pytest.raises(LeapSecondTableUnavailable):
            LeapSecondTable((), source="empty")

    def test_unordered_table_rejected(self):
        entries = (LeapSecondEntry(2441499.5, 11.0), LeapSecondEntry(2441317.5, 10.0))
        with pytest.raises(LeapSecondTableUnavailable) as exc_info:
            LeapSecondTable(entries)
        assert exc_info.value.context["jd"] == 2441317.5

    def test_duplicate_effective_jd_rejected(self):
        entries = (LeapSecondEntry(2441317.5, 10.0), LeapSecondEntry(2441317.5, 11.0))
        with pytest.raises(LeapSecondTableUnavailable):
            LeapSecondTable(entries)

    def test_from_entries_sorts(self):
        table = LeapSecondTable.from_entries(
            [LeapSecondEntry(2441499.5, 11.0), LeapSecondEntry(2441317.5, 10.0)],
            source="test",
        )
        assert [e.effective_jd for e in table.entries] == [2441317.5, 2441499.5]
        assert table.offset_seconds(2441400.5) == 10.0


class TestEntry:

    def test_effective_mjd(self):
        assert LeapSecondEntry(JD_2017, 37.0).effective_mjd == 57754.0

    def test_has_drift(self):
        assert LeapSecondEntry(2437300.5, 1.422818, 37300.0, 0.001296).has_drift
        assert not LeapSecondEntry(JD_2017, 37.0, 41317.0, 0.0).has_drift

    def test_mjd_conversions(self):
        assert jd_to_mjd(2400000.5) == 0.0
        assert mjd_to_jd(51544.5) == 2451545.0


class TestStaleness:

    def test_inside_history_is_not_stale(self, builtin_table):
        assert builtin_table.staleness_days(2451545.0) < 0
        assert not builtin_table.is_stale(2451545.0, 183.0)

    def test_past_threshold_is_stale(self, builtin_table):
        assert builtin_table.staleness_days(JD_2017 + 200) == 200.0
        assert builtin_table.is_stale(JD_2017 + 200, 183.0)
        assert not builtin_table.is_stale(JD_2017 + 100, 183.0)
