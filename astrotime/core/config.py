# astrotime/core/config.py
# -----------------------------------------------------------------------------
# Kernel configuration from the process environment
#
#   ASTROTIME_TAI_UTC_FILE      tai-utc.dat (or .json) for the default table
#   ASTROTIME_TAI_UTC_URL       download location for fetch_tai_utc_data()
#   ASTROTIME_STALE_AFTER_DAYS  days past the last entry before a table is stale
#   ASTROTIME_FETCH_TIMEOUT     network timeout in seconds
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

__all__ = ["KernelConfig", "USNO_TAI_UTC_URL"]

USNO_TAI_UTC_URL = "https://maia.usno.navy.mil/ser7/tai-utc.dat"

# Leap seconds are only inserted at the end of June or December.
DEFAULT_STALE_AFTER_DAYS = 183.0
DEFAULT_FETCH_TIMEOUT = 30.0


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class KernelConfig:
    """Settings for the default leap-second table and its network source."""
    tai_utc_file: Optional[str] = None
    tai_utc_url: str = USNO_TAI_UTC_URL
    stale_after_days: float = DEFAULT_STALE_AFTER_DAYS
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "KernelConfig":
        env = os.environ if env is None else env
        return cls(
            tai_utc_file=env.get("ASTROTIME_TAI_UTC_FILE", "").strip() or None,
            tai_utc_url=env.get("ASTROTIME_TAI_UTC_URL", "").strip() or USNO_TAI_UTC_URL,
            stale_after_days=_env_float(env, "ASTROTIME_STALE_AFTER_DAYS", DEFAULT_STALE_AFTER_DAYS),
            fetch_timeout_seconds=_env_float(env, "ASTROTIME_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
        )
