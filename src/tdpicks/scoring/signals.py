"""Independent sub-scores feeding the combiner.

Every scorer is a pure function returning a :class:`SignalScore` with the
numeric value and the human-readable reasons behind it.  Thresholds are
inclusive lower bounds unless the comparison reads ``<=``.
"""

from __future__ import annotations

from statistics import fmean
from typing import Iterable, List, Mapping, Optional, Union

from tdpicks.models import DefenseStat, GameScript, PlayerWeekRecord, SignalScore, TouchdownGame
from tdpicks.teams.matchups import Opponent


VOLUME_RANGE = (0.0, 10.0)
DEFENSE_RANGE = (1.0, 10.0)
GAME_SCRIPT_RANGE = (1.0, 10.0)
USAGE_TREND_RANGE = (1.0, 10.0)
HISTORICAL_RANGE = (0.0, 5.0)

NEUTRAL_DEFENSE = 5.0
TREND_LOOKBACK_WEEKS = 3
HISTORICAL_LOOKBACK_WEEKS = 3


def _clamp(value: float, bounds: tuple) -> float:
    low, high = bounds
    return max(low, min(high, value))


def _format_number(value: float) -> str:
    return f"{value:g}"


def volume_score(record: PlayerWeekRecord) -> SignalScore:
    reasoning: List[str] = []
    score = 0.0
    touches = record.touches

    if touches >= 20:
        score += 6
        reasoning.append(f"High volume ({touches} touches)")
    elif touches >= 15:
        score += 4
        reasoning.append(f"Good volume ({touches} touches)")
    elif touches >= 10:
        score += 2
        reasoning.append(f"Moderate volume ({touches} touches)")
    else:
        reasoning.append(f"Low volume ({touches} touches)")

    red_zone = record.red_zone_opportunities
    if red_zone >= 3:
        score += 4
        reasoning.append(f"High red zone usage ({red_zone} opportunities)")
    elif red_zone >= 2:
        score += 2
        reasoning.append(f"Good red zone usage ({red_zone} opportunities)")
    elif red_zone >= 1:
        score += 1
        reasoning.append(f"Some red zone usage ({red_zone} opportunities)")

    if record.targets > 0 and record.carries > 0:
        score += 1
        reasoning.append("Dual-threat usage")

    return SignalScore(score=_clamp(score, VOLUME_RANGE), reasoning=tuple(reasoning))


def defense_score(
    opponent: Union[Opponent, None],
    position: str,
    rush_table: Mapping[str, DefenseStat],
    pass_table: Mapping[str, DefenseStat],
) -> SignalScore:
    """Score the opponent's weakness against the player's touchdown type.

    Running backs are measured against the rush table; everyone else against
    the pass table.  An opponent missing from the table scores neutral.
    """

    is_rusher = position.strip().upper() == "RB"
    table = rush_table if is_rusher else pass_table
    stat = table.get(opponent) if opponent else None
    if stat is None:
        return SignalScore(score=NEUTRAL_DEFENSE, reasoning=("No defensive data available",))

    allowed = stat.touchdowns_allowed_per_game
    score = min(allowed * 2.5, 10.0)
    if allowed >= 2.0:
        tier = "Very Weak"
        score += 2
    elif allowed >= 1.5:
        tier = "Weak"
        score += 1
    elif allowed <= 0.8:
        tier = "Strong"
        score -= 2
    elif allowed <= 1.2:
        tier = "Solid"
        score -= 1
    else:
        tier = "Average"

    kind = "rush" if is_rusher else "pass"
    reason = f"{tier} {kind} defense ({allowed:.1f} TDs/game allowed)"
    return SignalScore(score=_clamp(score, DEFENSE_RANGE), reasoning=(reason,))


def game_script_score(script: Optional[GameScript], position: str) -> SignalScore:
    script = script or GameScript(team="")
    reasoning: List[str] = []
    score = 5.0

    implied = script.implied_total
    if implied >= 28:
        score += 2
        reasoning.append(f"High-scoring game expected ({_format_number(implied)}+ points)")
    elif implied >= 24:
        score += 1
        reasoning.append(f"Good scoring game expected ({_format_number(implied)}+ points)")
    elif implied <= 20:
        score -= 1
        reasoning.append(f"Low-scoring game expected ({_format_number(implied)} points)")

    if script.spread >= 7:
        score += 1
        reasoning.append("Heavy favorite (positive game script)")
    elif script.spread >= 3:
        score += 0.5
        reasoning.append("Favored team (positive game script)")
    elif script.spread <= -7:
        if position.strip().upper() == "RB":
            score -= 2
            reasoning.append("Heavy underdog (negative RB game script)")
        else:
            score -= 1
            reasoning.append("Heavy underdog (negative game script)")

    if script.pace >= 70:
        score += 1
        reasoning.append("Fast-pace offense (more opportunities)")
    elif script.pace <= 60:
        score -= 0.5
        reasoning.append("Slow-pace offense (fewer opportunities)")

    if not reasoning:
        reasoning.append("Average game script expected")
    return SignalScore(score=_clamp(score, GAME_SCRIPT_RANGE), reasoning=tuple(reasoning))


def _same_player(left: str, right: str) -> bool:
    return left.strip().lower() == right.strip().lower()


def prior_weeks(
    current: PlayerWeekRecord,
    history: Iterable[PlayerWeekRecord],
    lookback: int = TREND_LOOKBACK_WEEKS,
) -> List[PlayerWeekRecord]:
    """Return the player's records from the ``lookback`` weeks before ``current``."""

    earliest = current.week - lookback
    return [
        record
        for record in history
        if _same_player(record.player_name, current.player_name)
        and earliest <= record.week < current.week
    ]


def usage_trend_score(current: PlayerWeekRecord, history: Iterable[PlayerWeekRecord]) -> SignalScore:
    """Compare this week's usage to the trailing mean of up to three prior weeks."""

    previous = prior_weeks(current, history)
    if not previous:
        return SignalScore(score=5.0, reasoning=("No trend data available",))

    baseline_touches = fmean(record.touches for record in previous)
    baseline_red_zone = fmean(record.red_zone_opportunities for record in previous)
    reasoning: List[str] = []
    score = 5.0

    touch_trend = (current.touches - baseline_touches) / max(baseline_touches, 1.0)
    if touch_trend >= 0.2:
        score += 2
        reasoning.append("Volume trending up significantly")
    elif touch_trend >= 0.1:
        score += 1
        reasoning.append("Volume trending up")
    elif touch_trend <= -0.2:
        score -= 1
        reasoning.append("Volume trending down")

    red_zone_trend = (current.red_zone_opportunities - baseline_red_zone) / max(baseline_red_zone, 0.5)
    if red_zone_trend >= 0.5:
        score += 1
        reasoning.append("Red zone usage increasing")
    elif red_zone_trend <= -0.5:
        score -= 1
        reasoning.append("Red zone usage decreasing")

    if not reasoning:
        reasoning.append("Stable usage trends")
    return SignalScore(score=_clamp(score, USAGE_TREND_RANGE), reasoning=tuple(reasoning))


def historical_score(player_name: str, week: int, games: Iterable[TouchdownGame]) -> SignalScore:
    earliest = week - HISTORICAL_LOOKBACK_WEEKS
    touchdowns = sum(
        game.total_touchdowns
        for game in games
        if _same_player(game.player_name, player_name) and earliest <= game.week < week
    )
    window = f"in last {HISTORICAL_LOOKBACK_WEEKS} games"
    if touchdowns >= 3:
        return SignalScore(score=5.0, reasoning=(f"Hot recent form ({touchdowns} TDs {window})",))
    if touchdowns >= 2:
        return SignalScore(score=3.0, reasoning=(f"Good recent form ({touchdowns} TDs {window})",))
    if touchdowns >= 1:
        return SignalScore(score=1.0, reasoning=(f"Some recent production ({touchdowns} TD {window})",))
    return SignalScore(score=0.0, reasoning=("No recent TDs",))
