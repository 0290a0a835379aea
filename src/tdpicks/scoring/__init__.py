"""Signal scoring, combination and the weekly recommendation engine."""

from .combiner import adjust_for_injury, assign_tier, combine, retier
from .engine import RecommendationEngine, primary_players, ranking_key, scorer_names
from .rookies import BreakoutPlayer, VeteranRegistry, apply_breakout_boost, find_breakout_players
from .signals import (
    defense_score,
    game_script_score,
    historical_score,
    usage_trend_score,
    volume_score,
)

__all__ = [
    "BreakoutPlayer",
    "RecommendationEngine",
    "VeteranRegistry",
    "adjust_for_injury",
    "apply_breakout_boost",
    "assign_tier",
    "combine",
    "defense_score",
    "find_breakout_players",
    "game_script_score",
    "historical_score",
    "primary_players",
    "ranking_key",
    "retier",
    "scorer_names",
    "usage_trend_score",
    "volume_score",
]
