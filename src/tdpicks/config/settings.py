"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .profiles import DEFAULT_PROFILE, get_profile


logger = logging.getLogger(__name__)

VALIDATION_DELAY_ENV = "TDPICKS_VALIDATION_DELAY"
LIST_SIZE_ENV = "TDPICKS_LIST_SIZE"
MAX_PER_TEAM_ENV = "TDPICKS_MAX_PER_TEAM"
PROFILE_ENV = "TDPICKS_PROFILE"
DB_PATH_ENV = "TDPICKS_DB_PATH"
ROSTER_URL_ENV = "TDPICKS_ROSTER_URL"

DEFAULT_VALIDATION_DELAY = 1.0
DEFAULT_LIST_SIZE = 20
DEFAULT_MAX_PER_TEAM = 2
DEFAULT_ROSTER_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_profile(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return get_profile(raw).name
    except KeyError:
        logger.warning("Unknown weighting profile in %s: %s; using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    validation_delay: float = DEFAULT_VALIDATION_DELAY
    list_size: int = DEFAULT_LIST_SIZE
    max_per_team: int = DEFAULT_MAX_PER_TEAM
    profile: str = DEFAULT_PROFILE
    db_path: Optional[str] = None
    roster_url: str = DEFAULT_ROSTER_URL


def load_settings() -> Settings:
    """Build settings from ``TDPICKS_*`` variables, falling back to defaults."""

    return Settings(
        validation_delay=_env_float(VALIDATION_DELAY_ENV, DEFAULT_VALIDATION_DELAY, clamp_min=0.0, clamp_max=30.0),
        list_size=_env_int(LIST_SIZE_ENV, DEFAULT_LIST_SIZE, min_value=1),
        max_per_team=_env_int(MAX_PER_TEAM_ENV, DEFAULT_MAX_PER_TEAM, min_value=1),
        profile=_env_profile(PROFILE_ENV, DEFAULT_PROFILE),
        db_path=os.getenv(DB_PATH_ENV) or None,
        roster_url=(os.getenv(ROSTER_URL_ENV) or DEFAULT_ROSTER_URL).rstrip("/"),
    )
