"""Shared record types."""

from .player import (
    DefenseStat,
    GameScript,
    InjuryStatus,
    Matchup,
    PlayerWeekRecord,
    Recommendation,
    SignalScore,
    TouchdownGame,
    TouchdownRow,
    normalize_player_name,
)

__all__ = [
    "DefenseStat",
    "GameScript",
    "InjuryStatus",
    "Matchup",
    "PlayerWeekRecord",
    "Recommendation",
    "SignalScore",
    "TouchdownGame",
    "TouchdownRow",
    "normalize_player_name",
]
