"""Weighted combination of signal scores into a 0-10 final score and tier."""

from __future__ import annotations

import logging
import math
from typing import Mapping, Optional, Sequence, Tuple, Union

from tdpicks.config.profiles import DEFAULT_TIER, INJURY_PENALTIES, TIER_RULES, TierRule, WeightingProfile
from tdpicks.models import InjuryStatus, Recommendation, SignalScore


logger = logging.getLogger(__name__)

FINAL_SCORE_RANGE = (0, 10)
INJURY_FLOOR = 1


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _value(signal: Union[SignalScore, float, int]) -> float:
    return signal.score if isinstance(signal, SignalScore) else float(signal)


def combine(signals: Mapping[str, Union[SignalScore, float]], profile: WeightingProfile) -> int:
    """Return ``sum(weight * score)`` over the profile's signals, halves rounded up.

    Signals the profile weights but the mapping lacks contribute zero.
    """

    total = 0.0
    for signal, weight in profile.weights:
        if signal not in signals:
            logger.debug("Signal %s missing for profile %s; treating as 0", signal, profile.name)
            continue
        total += weight * _value(signals[signal])
    low, high = FINAL_SCORE_RANGE
    return max(low, min(high, round_half_up(total)))


def assign_tier(
    final_score: int,
    *,
    targets: int,
    carries: int,
    red_zone_opportunities: int,
    rules: Sequence[TierRule] = TIER_RULES,
) -> str:
    for rule in rules:
        if rule.matches(
            final_score,
            targets=targets,
            carries=carries,
            red_zone_opportunities=red_zone_opportunities,
        ):
            return rule.label
    return DEFAULT_TIER


def adjust_for_injury(final_score: int, status: InjuryStatus) -> Tuple[int, Optional[str]]:
    """Apply the questionable/doubtful penalty, never dropping below the floor."""

    penalty = INJURY_PENALTIES.get(status.value)
    if not penalty:
        return final_score, None
    adjusted = max(final_score - penalty, INJURY_FLOOR)
    return adjusted, f"{status.value} injury status (-{penalty})"


def retier(recommendation: Recommendation) -> Recommendation:
    """Return a copy with the tier recomputed from its current final score."""

    tier = assign_tier(
        recommendation.final_score,
        targets=recommendation.targets,
        carries=recommendation.carries,
        red_zone_opportunities=recommendation.red_zone_opportunities,
    )
    if tier == recommendation.tier:
        return recommendation
    return recommendation.model_copy(update={"tier": tier})
