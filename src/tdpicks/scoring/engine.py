"""Weekly pipeline: opponents, signals, combination, boosts, eligibility, ranking."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from tdpicks.config.profiles import DEFAULT_PROFILE, QuotaRules, WeightingProfile, get_profile
from tdpicks.models import (
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
from tdpicks.scoring import signals as scorers
from tdpicks.scoring.combiner import adjust_for_injury, assign_tier, combine
from tdpicks.scoring.rookies import VeteranRegistry, apply_breakout_boost, find_breakout_players
from tdpicks.selection.eligibility import EligibilityFilter, EligibilityReport
from tdpicks.selection.quota import QuotaSelector, SelectionResult
from tdpicks.teams.matchups import MatchupIndex
from tdpicks.teams.resolver import DEFAULT_RESOLVER, TeamNameResolver


logger = logging.getLogger(__name__)


def ranking_key(rec: Recommendation) -> tuple:
    return (-rec.final_score, -rec.red_zone_opportunities, -rec.touches, rec.player_name)


def latest_records(records: Iterable[PlayerWeekRecord], week: int) -> List[PlayerWeekRecord]:
    """Most recent record per player at or before ``week``, in first-seen order."""

    latest: Dict[str, PlayerWeekRecord] = {}
    for record in records:
        if record.week > week:
            continue
        key = normalize_player_name(record.player_name)
        current = latest.get(key)
        if current is None or record.week >= current.week:
            latest[key] = record
    return list(latest.values())


def primary_players(
    rows: Iterable[TouchdownRow],
    top_n: int = 2,
    resolver: Optional[TeamNameResolver] = None,
) -> List[TouchdownRow]:
    """Top ``top_n`` touchdown scorers per team, ordered by touchdowns then name.

    Teams are grouped by canonical name when a ``resolver`` is given.
    """

    by_team: Dict[str, List[TouchdownRow]] = defaultdict(list)
    for row in rows:
        team = resolver.standardize(row.team) if resolver is not None else row.team
        by_team[team].append(row)
    selected: List[TouchdownRow] = []
    for team_rows in by_team.values():
        team_rows.sort(key=lambda row: (-row.value, row.player))
        selected.extend(team_rows[:top_n])
    selected.sort(key=lambda row: (-row.value, row.player))
    return selected


def scorer_names(rows: Iterable[Union[TouchdownRow, TouchdownGame]]) -> List[str]:
    """Names of players with at least one touchdown in a season table."""

    names: List[str] = []
    for row in rows:
        if isinstance(row, TouchdownRow):
            if row.value > 0:
                names.append(row.player)
        elif row.total_touchdowns > 0:
            names.append(row.player_name)
    return names


class RecommendationEngine:
    def __init__(
        self,
        *,
        resolver: Optional[TeamNameResolver] = None,
        rush_defense: Optional[Mapping[str, DefenseStat]] = None,
        pass_defense: Optional[Mapping[str, DefenseStat]] = None,
        profile: Union[WeightingProfile, str, None] = None,
        game_scripts: Optional[Mapping[str, GameScript]] = None,
        injuries: Optional[Mapping[str, InjuryStatus]] = None,
        touchdown_games: Sequence[TouchdownGame] = (),
        season_touchdowns: Sequence[Sequence[TouchdownRow]] = (),
        primary_top_n: int = 2,
        prior_scorers: Iterable[str] = (),
        veterans: Optional[VeteranRegistry] = None,
        breakout_min_rate: float = 1.0,
        breakout_min_total: int = 2,
    ) -> None:
        self.resolver = resolver or DEFAULT_RESOLVER
        self.rush_defense = self._by_canonical(rush_defense or {})
        self.pass_defense = self._by_canonical(pass_defense or {})
        if profile is None:
            profile = DEFAULT_PROFILE
        self.profile = get_profile(profile) if isinstance(profile, str) else profile
        self.game_scripts = self._by_canonical(game_scripts or {})
        self.injuries = {normalize_player_name(name): status for name, status in (injuries or {}).items()}
        self.touchdown_games = tuple(touchdown_games)
        self.season_touchdowns = tuple(tuple(table) for table in season_touchdowns)
        self.primary_top_n = primary_top_n
        self.prior_scorers = tuple(prior_scorers)
        self.veterans = veterans or VeteranRegistry()
        self.breakout_min_rate = breakout_min_rate
        self.breakout_min_total = breakout_min_total
        self.last_report: Optional[EligibilityReport] = None

    def _by_canonical(self, table: Mapping[str, object]) -> Dict[str, object]:
        return {self.resolver.standardize(team): value for team, value in table.items()}

    def injury_status(self, player_name: str) -> InjuryStatus:
        return self.injuries.get(normalize_player_name(player_name), InjuryStatus.ACTIVE)

    def _apply_injury(self, rec: Recommendation) -> Recommendation:
        status = self.injury_status(rec.player_name)
        final_score, reason = adjust_for_injury(rec.final_score, status)
        reasoning = [*rec.reasoning, reason] if reason else rec.reasoning
        return rec.model_copy(update={"injury_status": status, "final_score": final_score, "reasoning": reasoning})

    def compute_signals(
        self,
        record: PlayerWeekRecord,
        opponent: str,
        week: int,
        history: Sequence[PlayerWeekRecord],
    ) -> Dict[str, SignalScore]:
        team = self.resolver.standardize(record.team)
        return {
            "volume": scorers.volume_score(record),
            "defense": scorers.defense_score(opponent, record.position, self.rush_defense, self.pass_defense),
            "game_script": scorers.game_script_score(self.game_scripts.get(team), record.position),
            "usage_trend": scorers.usage_trend_score(record, history),
            "historical": scorers.historical_score(record.player_name, week, self.touchdown_games),
        }

    def score_record(
        self,
        record: PlayerWeekRecord,
        opponent: str,
        week: int,
        history: Sequence[PlayerWeekRecord] = (),
    ) -> Recommendation:
        signals = self.compute_signals(record, opponent, week, history)
        combined = combine(signals, self.profile)
        red_zone = record.red_zone_opportunities
        tier = assign_tier(combined, targets=record.targets, carries=record.carries, red_zone_opportunities=red_zone)

        reasoning: List[str] = []
        for signal in self.profile.signals:
            reasoning.extend(signals[signal].reasoning)

        status = self.injury_status(record.player_name)
        final_score, injury_reason = adjust_for_injury(combined, status)
        if injury_reason:
            reasoning.append(injury_reason)

        return Recommendation(
            player_name=record.player_name,
            team=self.resolver.standardize(record.team),
            opponent=opponent,
            position=record.position,
            volume_score=signals["volume"].score,
            defense_score=signals["defense"].score,
            game_script_score=signals["game_script"].score,
            usage_trend_score=signals["usage_trend"].score,
            historical_score=signals["historical"].score,
            final_score=final_score,
            tier=tier,
            injury_status=status,
            targets=record.targets,
            carries=record.carries,
            red_zone_opportunities=red_zone,
            reasoning=reasoning,
        )

    def candidate_records(self, records: Sequence[PlayerWeekRecord]) -> List[PlayerWeekRecord]:
        """Restrict ``records`` to each team's primary scorers when season tables are loaded.

        Every table (rushing, receiving) contributes its own top scorers per team.
        """

        if not self.season_touchdowns:
            return list(records)
        primary = {
            normalize_player_name(row.player)
            for table in self.season_touchdowns
            for row in primary_players(table, self.primary_top_n, self.resolver)
        }
        kept = [record for record in records if normalize_player_name(record.player_name) in primary]
        logger.info("Primary scorer filter kept %d of %d players", len(kept), len(records))
        return kept

    def build(
        self,
        week: int,
        volume_records: Sequence[PlayerWeekRecord],
        matchups: Union[MatchupIndex, Iterable[Matchup]],
    ) -> List[Recommendation]:
        """Score, boost, filter and rank every player with an opponent in ``week``."""

        if not volume_records:
            logger.info("No volume data for week %s; nothing to recommend", week)
            return []

        index = matchups if isinstance(matchups, MatchupIndex) else MatchupIndex(matchups, self.resolver, week)
        current = latest_records(volume_records, week)
        candidates = self.candidate_records(current)

        scored: List[Recommendation] = []
        for record in candidates:
            opponent = index.opponent_of(record.team)
            if not opponent:
                logger.info("Skipping %s (%s): no opponent in week %s", record.player_name, record.team, week)
                continue
            scored.append(self.score_record(record, opponent, week, volume_records))

        breakouts = find_breakout_players(
            self.touchdown_games,
            self.prior_scorers,
            self.veterans,
            min_rate=self.breakout_min_rate,
            min_total=self.breakout_min_total,
        )
        if breakouts:
            scored = apply_breakout_boost(scored, breakouts, current, index, self.resolver)
            scored = [self._apply_injury(rec) if rec.synthesized else rec for rec in scored]

        eligibility = EligibilityFilter(
            bye_teams=index.bye_teams(),
            injury_lookup=self.injuries,
            resolver=self.resolver,
        )
        kept, report = eligibility.filter(scored)
        self.last_report = report
        if report.dropped:
            logger.info(
                "Eligibility removed %d of %d candidates (%d bye, %d ruled out)",
                report.dropped,
                report.total,
                len(report.on_bye),
                len(report.ruled_out),
            )

        kept.sort(key=ranking_key)
        return kept

    async def recommend(
        self,
        week: int,
        volume_records: Sequence[PlayerWeekRecord],
        matchups: Union[MatchupIndex, Iterable[Matchup]],
        selector: QuotaSelector,
        *,
        max_per_team: int = 2,
        list_size: int = 20,
        quota: Optional[QuotaRules] = None,
    ) -> SelectionResult:
        """Build the ranked pool and run the validated quota walk over it.

        ``quota`` restricts the pool to its positions and replaces both limits.
        """

        ranked = self.build(week, volume_records, matchups)
        if quota is not None:
            ranked = [rec for rec in ranked if quota.accepts_position(rec.position)]
            max_per_team, list_size = quota.max_per_team, quota.total_limit
        result = await selector.select(ranked, max_per_team=max_per_team, total_limit=list_size)
        logger.info(
            "Week %s: %d recommendations after %d validations (%d rejected)",
            week,
            len(result.selected),
            result.validated_count,
            len(result.rejected),
        )
        return result
