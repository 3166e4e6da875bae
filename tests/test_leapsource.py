"""
Tests for reading, parsing and fetching leap-second tables.
"""

import json
import os
import stat
import urllib.error
from unittest.mock import patch

import pytest

from astrotime.core.config import USNO_TAI_UTC_URL
from astrotime.core.errors import ErrorClass, LeapSecondTableUnavailable
from astrotime.core.leapsource import (
    fetch_tai_utc_data,
    load_leap_second_table,
    parse_leap_second_json,
    parse_tai_utc_dat,
)


def _respond(mock_urlopen, body):
    mock_urlopen.return_value.__enter__.return_value.read.return_value = body.encode("utf-8")


class TestParseTaiUtcDat:

    def test_parses_every_record(self, sample_table):
        assert len(sample_table) == 7
        assert sample_table.source == "sample"
        assert sample_table.first_jd == 2437300.5
        assert sample_table.last_jd == 2457754.5

    def test_drift_fields(self, sample_table):
        entry = sample_table.entry_for(2437700.5)
        assert entry.base_offset_seconds == 1.845858
        assert entry.base_mjd_reference == 37665.0
        assert entry.drift_rate_seconds_per_day == 0.0011232

    def test_step_fields(self, sample_table):
        entry = sample_table.entry_for(2457754.5)
        assert entry.base_offset_seconds == 37.0
        assert not entry.has_drift

    def test_blank_lines_skipped_and_records_sorted(self, sample_dat_text):
        lines = sample_dat_text.splitlines()
        shuffled = "\n\n".join(reversed(lines)) + "\n\n"
        table = parse_tai_utc_dat(shuffled)
        assert len(table) == 7
        assert table.first_jd == 2437300.5

    def test_malformed_line(self, sample_dat_text):
        text = sample_dat_text + " 2018 JAN  1 =JD 2458119.5  TAI-UTC= thirty-eight\n"
        with pytest.raises(LeapSecondTableUnavailable) as exc_info:
            parse_tai_utc_dat(text, source="broken")
        err = exc_info.value
        assert err.error_class is ErrorClass.LEAP_SECOND_SOURCE
        assert err.context == {"source": "broken", "line": 8}

    def test_empty_text(self):
        with pytest.raises(LeapSecondTableUnavailable):
            parse_tai_utc_dat("\n\n")


class TestParseJson:

    def test_mjd_and_jd_keys(self):
        text = json.dumps([
            {"mjd": 57754.0, "delta_at": 37.0},
            {"jd": 2437300.5, "tai_utc": 1.422818, "mjd_reference": 37300.0, "drift": 0.001296},
        ])
        table = parse_leap_second_json(text)
        assert table.source == "json:<json>"
        assert table.first_jd == 2437300.5
        assert table.last_jd == 2457754.5
        assert table.entries[0].has_drift
        assert table.offset_seconds(2457800.5) == 37.0

    @pytest.mark.parametrize("text", [
        "not json",
        json.dumps({"mjd": 57754.0, "delta_at": 37.0}),
        json.dumps(["row"]),
        json.dumps([{"mjd": 57754.0}]),
        json.dumps([{"delta_at": 37.0}]),
        json.dumps([{"mjd": "soon", "delta_at": 37.0}]),
        json.dumps([]),
    ])
    def test_rejects_bad_tables(self, text):
        with pytest.raises(LeapSecondTableUnavailable):
            parse_leap_second_json(text)


class TestLoad:

    def test_dat_file(self, sample_dat_file):
        table = load_leap_second_table(sample_dat_file)
        assert len(table) == 7
        assert table.source == str(sample_dat_file)

    def test_json_file(self, tmp_path):
        path = tmp_path / "leaps.json"
        path.write_text(json.dumps([{"mjd": 41317.0, "tai_utc": 10.0}]), encoding="utf-8")
        table = load_leap_second_table(str(path))
        assert table.source == f"json:{path}"
        assert table.offset_seconds(2451545.0) == 10.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(LeapSecondTableUnavailable) as exc_info:
            load_leap_second_table(tmp_path / "absent.dat")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)


class TestFetch:

    def test_existing_file_is_kept(self, sample_dat_file):
        with patch("urllib.request.urlopen") as mock_urlopen:
            result = fetch_tai_utc_data(sample_dat_file)
        mock_urlopen.assert_not_called()
        assert result == sample_dat_file

    def test_downloads_missing_file(self, tmp_path, sample_dat_text):
        target = tmp_path / "data" / "tai-utc.dat"
        with patch("urllib.request.urlopen") as mock_urlopen:
            _respond(mock_urlopen, sample_dat_text)
            result = fetch_tai_utc_data(target)
        mock_urlopen.assert_called_once_with(USNO_TAI_UTC_URL, timeout=30.0)
        assert result == target
        assert target.read_text(encoding="utf-8") == sample_dat_text
        assert [p.name for p in target.parent.iterdir()] == ["tai-utc.dat"]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_downloaded_file_is_world_readable(self, tmp_path, sample_dat_text):
        target = tmp_path / "tai-utc.dat"
        with patch("urllib.request.urlopen") as mock_urlopen:
            _respond(mock_urlopen, sample_dat_text)
            fetch_tai_utc_data(target)
        assert stat.S_IMODE(target.stat().st_mode) == 0o644

    def test_update_replaces_file(self, sample_dat_file, sample_dat_text):
        newer = sample_dat_text + " 2026 JAN  1 =JD 2461041.5  TAI-UTC=  38.0       S + (MJD - 41317.) X 0.0      S\n"
        with patch("urllib.request.urlopen") as mock_urlopen:
            _respond(mock_urlopen, newer)
            fetch_tai_utc_data(sample_dat_file, update=True, url="https://example.test/tai-utc.dat", timeout=5)
        mock_urlopen.assert_called_once_with("https://example.test/tai-utc.dat", timeout=5)
        assert load_leap_second_table(sample_dat_file).last_jd == 2461041.5

    def test_environment_overrides(self, tmp_path, sample_dat_text, monkeypatch):
        monkeypatch.setenv("ASTROTIME_TAI_UTC_URL", "https://mirror.test/tai-utc.dat")
        monkeypatch.setenv("ASTROTIME_FETCH_TIMEOUT", "2.5")
        with patch("urllib.request.urlopen") as mock_urlopen:
            _respond(mock_urlopen, sample_dat_text)
            fetch_tai_utc_data(tmp_path / "tai-utc.dat")
        mock_urlopen.assert_called_once_with("https://mirror.test/tai-utc.dat", timeout=2.5)

    def test_bad_response_keeps_existing_file(self, sample_dat_file, sample_dat_text):
        with patch("urllib.request.urlopen") as mock_urlopen:
            _respond(mock_urlopen, "<html>Service Unavailable</html>")
            with pytest.raises(LeapSecondTableUnavailable):
                fetch_tai_utc_data(sample_dat_file, update=True)
        assert sample_dat_file.read_text(encoding="utf-8") == sample_dat_text

    def test_network_error(self, tmp_path):
        target = tmp_path / "tai-utc.dat"
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("unreachable")):
            with pytest.raises(LeapSecondTableUnavailable) as exc_info:
                fetch_tai_utc_data(target)
        assert exc_info.value.context["source"] == USNO_TAI_UTC_URL
        assert not target.exists()
