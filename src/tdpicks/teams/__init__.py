"""Team identity and schedule helpers."""

from .matchups import NOT_FOUND, MatchupIndex, ScheduleError, team_key
from .resolver import (
    DEFAULT_RESOLVER,
    NFL_TEAMS,
    TeamIdentity,
    TeamNameResolver,
    normalize_team_text,
    standardize,
)

__all__ = [
    "DEFAULT_RESOLVER",
    "MatchupIndex",
    "NFL_TEAMS",
    "NOT_FOUND",
    "ScheduleError",
    "TeamIdentity",
    "TeamNameResolver",
    "normalize_team_text",
    "standardize",
    "team_key",
]
