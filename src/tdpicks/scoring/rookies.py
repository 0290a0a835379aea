"""Breakout (rookie / first-time scorer) detection and score boosting."""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from tdpicks.models import PlayerWeekRecord, Recommendation, TouchdownGame, normalize_player_name
from tdpicks.scoring.combiner import assign_tier, retier, round_half_up
from tdpicks.teams.matchups import MatchupIndex
from tdpicks.teams.resolver import DEFAULT_RESOLVER, TeamNameResolver


logger = logging.getLogger(__name__)

SYNTHESIZED_BASELINE = 6
MAX_FINAL_SCORE = 10


class VeteranRegistry:
    """Names that should never be treated as breakout candidates."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: Set[str] = {normalize_player_name(name) for name in names if name.strip()}

    def __len__(self) -> int:
        return len(self._names)

    def is_known_veteran(self, name: str) -> bool:
        return normalize_player_name(name) in self._names

    @classmethod
    def load(cls, path: Path) -> "VeteranRegistry":
        """Load from a JSON list / ``{"veterans": [...]}`` or a one-name-per-line text file."""

        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            data = json.loads(text)
            if isinstance(data, dict):
                data = data.get("veterans", [])
            return cls(str(name) for name in data)
        return cls(line.strip() for line in text.splitlines() if line.strip() and not line.startswith("#"))


@dataclass(frozen=True)
class BreakoutPlayer:
    player_name: str
    team: str
    touchdowns: int
    games: int

    @property
    def rate(self) -> float:
        return self.touchdowns / self.games if self.games else 0.0

    @property
    def boost(self) -> int:
        return round_half_up(self.rate * 2)

    def describe(self) -> str:
        return f"Breakout: {self.touchdowns} TDs in {self.games} games"


def find_breakout_players(
    current_games: Iterable[TouchdownGame],
    prior_scorers: Iterable[str],
    registry: Optional[VeteranRegistry] = None,
    *,
    min_rate: float = 1.0,
    min_total: int = 2,
) -> List[BreakoutPlayer]:
    """Current-season scorers absent from last season who clear both thresholds.

    ``games`` counts the distinct weeks a player appears in ``current_games``.
    Results are ordered by rate, then touchdowns, then name.
    """

    registry = registry or VeteranRegistry()
    prior = {normalize_player_name(name) for name in prior_scorers}

    weeks: Dict[str, Set[int]] = defaultdict(set)
    touchdowns: Dict[str, int] = defaultdict(int)
    display: Dict[str, TouchdownGame] = {}
    for game in current_games:
        key = normalize_player_name(game.player_name)
        weeks[key].add(game.week)
        touchdowns[key] += game.total_touchdowns
        display.setdefault(key, game)

    breakouts: List[BreakoutPlayer] = []
    for key, total in touchdowns.items():
        if total <= 0 or key in prior:
            continue
        source = display[key]
        if registry.is_known_veteran(source.player_name):
            logger.debug("Skipping known veteran %s", source.player_name)
            continue
        candidate = BreakoutPlayer(
            player_name=source.player_name,
            team=source.team,
            touchdowns=total,
            games=len(weeks[key]),
        )
        if candidate.touchdowns < min_total or candidate.rate < min_rate:
            continue
        breakouts.append(candidate)

    breakouts.sort(key=lambda player: (-player.rate, -player.touchdowns, player.player_name))
    return breakouts


def _synthesize(
    breakout: BreakoutPlayer,
    record: PlayerWeekRecord,
    opponent: str,
    team: str,
) -> Recommendation:
    final_score = min(SYNTHESIZED_BASELINE + breakout.boost, MAX_FINAL_SCORE)
    red_zone = record.red_zone_opportunities
    return Recommendation(
        player_name=record.player_name,
        team=team,
        opponent=opponent,
        position=record.position,
        final_score=final_score,
        tier=assign_tier(
            final_score,
            targets=record.targets,
            carries=record.carries,
            red_zone_opportunities=red_zone,
        ),
        targets=record.targets,
        carries=record.carries,
        red_zone_opportunities=red_zone,
        reasoning=[breakout.describe(), f"Added from breakout detection (baseline {SYNTHESIZED_BASELINE})"],
        boosted=True,
        synthesized=True,
    )


def apply_breakout_boost(
    recommendations: Sequence[Recommendation],
    breakouts: Iterable[BreakoutPlayer],
    volume_records: Iterable[PlayerWeekRecord],
    matchups: Optional[MatchupIndex] = None,
    resolver: Optional[TeamNameResolver] = None,
) -> List[Recommendation]:
    """Boost listed breakout players and synthesize entries for the rest.

    A breakout player missing from ``recommendations`` is only added when the
    volume table has a record for them and, if ``matchups`` is given, their
    team has an opponent this week. Synthesized entries carry the canonical
    team name so per-team caps count them with the scored entries.
    """

    resolver = resolver or (matchups.resolver if matchups is not None else DEFAULT_RESOLVER)
    result = list(recommendations)
    index_by_name: Dict[str, int] = {
        normalize_player_name(rec.player_name): position for position, rec in enumerate(result)
    }
    volume_by_name: Mapping[str, PlayerWeekRecord] = {
        normalize_player_name(record.player_name): record for record in volume_records
    }

    for breakout in breakouts:
        key = normalize_player_name(breakout.player_name)
        position = index_by_name.get(key)
        if position is not None:
            existing = result[position]
            boosted = existing.model_copy(
                update={
                    "final_score": min(existing.final_score + breakout.boost, MAX_FINAL_SCORE),
                    "reasoning": [*existing.reasoning, breakout.describe()],
                    "boosted": True,
                }
            )
            result[position] = retier(boosted)
            logger.info("Boosted %s by %d (%s)", existing.player_name, breakout.boost, breakout.describe())
            continue

        record = volume_by_name.get(key)
        if record is None:
            logger.info("Breakout player %s has no volume record; skipping", breakout.player_name)
            continue

        opponent = matchups.opponent_of(record.team) if matchups is not None else ""
        if matchups is not None and not opponent:
            logger.info("Breakout player %s has no opponent this week; skipping", breakout.player_name)
            continue

        synthesized = _synthesize(breakout, record, str(opponent), resolver.standardize(record.team))
        index_by_name[key] = len(result)
        result.append(synthesized)
        logger.info("Synthesized breakout entry for %s (score %d)", record.player_name, synthesized.final_score)

    return result
