# astrotime/core/leapsource.py
# -----------------------------------------------------------------------------
# Leap-Second Source: file parsing and retrieval
#
# Reads the USNO tai-utc.dat layout
#
#   1972 JAN  1 =JD 2441317.5  TAI-UTC=  10.0       S + (MJD - 41317.) X 0.0      S
#
# or an operations override table in JSON
#
#   [{"mjd": 57754.0, "delta_at": 37.0}, {"jd": 2437300.5, "tai_utc": 1.422818,
#     "mjd_reference": 37300.0, "drift": 0.001296}]
#
# and downloads the USNO file on request. The kernel itself never touches the
# network; only fetch_tai_utc_data() does.
# -----------------------------------------------------------------------------

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, List, Optional, Union

from .config import KernelConfig
from .errors import LeapSecondTableUnavailable
from .leapseconds import LeapSecondEntry, LeapSecondTable, mjd_to_jd

__all__ = [
    "parse_tai_utc_dat",
    "parse_leap_second_json",
    "load_leap_second_table",
    "fetch_tai_utc_data",
]

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

DOWNLOAD_FILE_MODE = 0o644

_NUM = r"[-+]?\d+(?:\.\d*)?"
_TAI_UTC_LINE_RE = re.compile(
    rf"^\s*(?P<label>\d{{4}}\s+[A-Z]{{3}}\s+\d{{1,2}})\s*"
    rf"=\s*JD\s+(?P<jd>{_NUM})\s+"
    rf"TAI-UTC=\s*(?P<offset>{_NUM})\s*S\s*"
    rf"\+\s*\(\s*MJD\s*-\s*(?P<mjd_ref>{_NUM})\s*\)\s*"
    rf"X\s*(?P<rate>{_NUM})\s*S\s*$",
    re.IGNORECASE,
)


def parse_tai_utc_dat(text: str, source: str = "<string>") -> LeapSecondTable:
    """
    Parse USNO tai-utc.dat text into a LeapSecondTable.

    Blank lines are skipped; any other line that does not match the USNO
    layout is an error.

    Raises:
        LeapSecondTableUnavailable: malformed line or no records
    """
    entries: List[LeapSecondEntry] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        m = _TAI_UTC_LINE_RE.match(line)
        if not m:
            raise LeapSecondTableUnavailable(
                f"Malformed leap-second record in {source} line {lineno}: {line.strip()!r}",
                source=source,
                line=lineno,
            )
        entries.append(LeapSecondEntry(
            effective_jd=float(m.group("jd")),
            base_offset_seconds=float(m.group("offset")),
            base_mjd_reference=float(m.group("mjd_ref")),
            drift_rate_seconds_per_day=float(m.group("rate")),
        ))

    table = LeapSecondTable.from_entries(entries, source=source)
    log.info("Parsed %d leap-second records from %s", len(table), source)
    return table


def _json_number(row: dict, keys: tuple, default: Optional[float], index: int, source: str) -> float:
    for key in keys:
        if key in row:
            try:
                return float(row[key])
            except (TypeError, ValueError):
                raise LeapSecondTableUnavailable(
                    f"Non-numeric {key!r} in {source} row {index}: {row[key]!r}",
                    source=source,
                    row=index,
                )
    if default is None:
        raise LeapSecondTableUnavailable(
            f"Missing {' or '.join(keys)} in {source} row {index}",
            source=source,
            row=index,
        )
    return default


def parse_leap_second_json(text: str, source: str = "<json>") -> LeapSecondTable:
    """Parse a JSON override table (list of objects keyed by jd or mjd)."""
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise LeapSecondTableUnavailable(f"Invalid JSON in {source}: {e}", source=source) from e
    if not isinstance(data, list):
        raise LeapSecondTableUnavailable(f"{source} must hold a JSON list of records", source=source)

    entries: List[LeapSecondEntry] = []
    for index, row in enumerate(data):
        if not isinstance(row, dict):
            raise LeapSecondTableUnavailable(
                f"Record {index} in {source} is not an object", source=source, row=index
            )
        if "jd" in row:
            jd = _json_number(row, ("jd",), None, index, source)
        else:
            jd = mjd_to_jd(_json_number(row, ("mjd",), None, index, source))
        entries.append(LeapSecondEntry(
            effective_jd=jd,
            base_offset_seconds=_json_number(row, ("tai_utc", "delta_at"), None, index, source),
            base_mjd_reference=_json_number(row, ("mjd_reference",), 0.0, index, source),
            drift_rate_seconds_per_day=_json_number(row, ("drift",), 0.0, index, source),
        ))
    return LeapSecondTable.from_entries(entries, source=f"json:{source}")


def load_leap_second_table(path: PathLike) -> LeapSecondTable:
    """
    Load a leap-second table from disk.

    Args:
        path: USNO tai-utc.dat file, or a .json override table

    Returns:
        LeapSecondTable sorted by effective JD

    Raises:
        LeapSecondTableUnavailable: missing, unreadable or malformed file
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise LeapSecondTableUnavailable(f"Leap-second file not found: {p}", source=str(p)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise LeapSecondTableUnavailable(f"Cannot read leap-second file {p}: {e}", source=str(p)) from e

    if p.suffix.lower() == ".json":
        return parse_leap_second_json(text, source=str(p))
    return parse_tai_utc_dat(text, source=str(p))


def fetch_tai_utc_data(
    path: PathLike,
    *,
    update: bool = False,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Path:
    """
    Download tai-utc.dat to path unless it already exists.

    The download is parsed before it replaces an existing file, so a bad
    response never clobbers a good table.

    Args:
        path: Destination file
        update: Download even when the file exists
        url: Source URL (default from KernelConfig)
        timeout: Network timeout in seconds (default from KernelConfig)

    Returns:
        The destination path

    Raises:
        LeapSecondTableUnavailable: network failure or unparseable response
    """
    config = KernelConfig.from_env()
    url = url or config.tai_utc_url
    timeout = timeout if timeout is not None else config.fetch_timeout_seconds
    target = Path(path)

    if target.exists() and not update:
        log.info("Leap-second file %s already exists, skipping download", target)
        return target

    log.info("Downloading leap-second table from %s", url)
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            body = response.read().decode("utf-8", errors="replace")
    except (urllib.error.URLError, OSError) as e:
        raise LeapSecondTableUnavailable(f"Failed to download {url}: {e}", source=url) from e

    table = parse_tai_utc_dat(body, source=url)

    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=".tai-utc-", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(body)
        # mkstemp creates 0600; the table is shared data
        os.chmod(tmp_name, DOWNLOAD_FILE_MODE)
        os.replace(tmp_name, target)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise LeapSecondTableUnavailable(f"Cannot write {target}: {e}", source=url) from e

    log.info("Saved %d leap-second records to %s", len(table), target)
    return target
