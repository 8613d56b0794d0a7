"""Runtime settings resolved from ``DRAFTSYNC_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Mapping, Optional

from draftsync.ingest.picks import DEFAULT_STATS_API_URL


DEFAULT_DB_PATH = Path("draftsync.sqlite")
DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_TIMEOUT = 10.0

ENV_PREFIX = "DRAFTSYNC_"


@dataclass(frozen=True)
class Settings:
    db_path: Path | str = DEFAULT_DB_PATH
    stats_api_url: str = DEFAULT_STATS_API_URL
    draft_year: int = date.today().year
    poll_interval: float = DEFAULT_POLL_INTERVAL
    roster_timeout: float = DEFAULT_TIMEOUT
    picks_timeout: float = DEFAULT_TIMEOUT
    prospects_timeout: float = DEFAULT_TIMEOUT
    prospects_csv: Optional[Path] = None


def _float(env: Mapping[str, str], name: str, default: float, *, allow_zero: bool = False) -> float:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None
    if value < 0 or (value == 0 and not allow_zero):
        raise ValueError(f"{ENV_PREFIX}{name} must be positive, got {raw!r}")
    return value


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build settings from ``env`` (``os.environ`` by default).

    ``DRAFTSYNC_POLL_INTERVAL=0`` disables the background poller.
    """

    env = os.environ if env is None else env
    db_env = env.get(ENV_PREFIX + "DB_PATH")
    db_path: Path | str = DEFAULT_DB_PATH
    if db_env:
        db_path = db_env if db_env.startswith("file:") else Path(db_env)
    prospects_env = env.get(ENV_PREFIX + "PROSPECTS_CSV")
    return Settings(
        db_path=db_path,
        stats_api_url=env.get(ENV_PREFIX + "STATS_API_URL") or DEFAULT_STATS_API_URL,
        draft_year=_int(env, "DRAFT_YEAR", date.today().year),
        poll_interval=_float(env, "POLL_INTERVAL", DEFAULT_POLL_INTERVAL, allow_zero=True),
        roster_timeout=_float(env, "ROSTER_TIMEOUT", DEFAULT_TIMEOUT),
        picks_timeout=_float(env, "PICKS_TIMEOUT", DEFAULT_TIMEOUT),
        prospects_timeout=_float(env, "PROSPECTS_TIMEOUT", DEFAULT_TIMEOUT),
        prospects_csv=Path(prospects_env) if prospects_env else None,
    )
