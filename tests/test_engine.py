import pytest

from tdpicks.config import get_quota_rules
from tdpicks.models import DefenseStat, InjuryStatus, Matchup, PlayerWeekRecord, TouchdownGame, TouchdownRow
from tdpicks.scoring import RecommendationEngine, primary_players, ranking_key, scorer_names
from tdpicks.scoring.engine import latest_records
from tdpicks.selection import QuotaSelector, StaticStatusValidator, ValidationPolicy
from tdpicks.teams import MatchupIndex


def _record(name: str, team: str, position: str, week: int = 5, **usage) -> PlayerWeekRecord:
    return PlayerWeekRecord(player_name=name, team=team, position=position, week=week, **usage)


VOLUME = [
    _record("Star Back", "Kansas City Chiefs", "RB", targets=4, carries=18, red_zone_carries=3),
    _record("Deep Threat", "Buffalo Bills", "WR", targets=9, red_zone_targets=1),
    _record("Maybe Receiver", "Denver Broncos", "WR", targets=10, red_zone_targets=2),
    _record("Hurt Back", "Miami Dolphins", "RB", carries=16, red_zone_carries=2),
    _record("Idle Receiver", "Dallas Cowboys", "WR", targets=11, red_zone_targets=3),
]

SCHEDULE = [
    Matchup(away_team="Buffalo Bills", home_team="Miami Dolphins", week=5),
    Matchup(away_team="KC", home_team="DEN", week=5),
]


def _engine(**overrides) -> RecommendationEngine:
    options = {
        "rush_defense": {"DEN": DefenseStat(team="DEN", touchdowns_allowed_per_game=2.0)},
        "pass_defense": {},
        "injuries": {"Hurt Back": InjuryStatus.OUT, "Maybe Receiver": InjuryStatus.QUESTIONABLE},
    }
    options.update(overrides)
    return RecommendationEngine(**options)


def test_build_scores_filters_and_ranks():
    engine = _engine()

    recs = engine.build(5, VOLUME, SCHEDULE)

    assert [rec.player_name for rec in recs] == ["Star Back", "Maybe Receiver", "Deep Threat"]
    star = recs[0]
    assert star.opponent == "Denver Broncos"
    assert star.volume_score == 10.0
    assert star.defense_score == 7.0
    assert star.final_score == 8
    assert star.tier == "Strong Play"
    assert "Very Weak rush defense (2.0 TDs/game allowed)" in star.reasoning


def test_injury_penalty_applies_after_tiering():
    maybe = next(rec for rec in _engine().build(5, VOLUME, SCHEDULE) if rec.player_name == "Maybe Receiver")

    assert maybe.final_score == 4
    assert maybe.tier == "Speculative Play"
    assert maybe.injury_status is InjuryStatus.QUESTIONABLE
    assert maybe.reasoning[-1] == "Questionable injury status (-1)"


def test_eligibility_report_records_drops():
    engine = _engine()
    engine.build(5, VOLUME, SCHEDULE)

    report = engine.last_report
    assert report is not None
    assert report.total == 4
    assert report.ruled_out == ("Hurt Back",)


def test_players_without_opponent_are_skipped():
    recs = _engine().build(5, VOLUME, SCHEDULE)
    assert "Idle Receiver" not in {rec.player_name for rec in recs}


def test_no_volume_means_no_recommendations():
    assert _engine().build(5, [], SCHEDULE) == []


def test_reasoning_only_covers_weighted_signals():
    recs = _engine(profile="classic").build(5, VOLUME, SCHEDULE)
    star = recs[0]

    assert not any("game expected" in reason for reason in star.reasoning)
    assert "No recent TDs" in star.reasoning


def test_unknown_profile_name_raises():
    with pytest.raises(KeyError):
        _engine(profile="aggressive")


def test_breakout_players_are_boosted_in_pipeline():
    games = [
        TouchdownGame(player_name="Deep Threat", team="Buffalo Bills", week=week, receiving_touchdowns=1)
        for week in (2, 3, 4)
    ]
    recs = _engine(touchdown_games=games).build(5, VOLUME, SCHEDULE)
    threat = next(rec for rec in recs if rec.player_name == "Deep Threat")

    assert threat.boosted
    assert threat.final_score == 5
    assert threat.reasoning[-1] == "Breakout: 3 TDs in 3 games"


def test_latest_records_pick_most_recent_week_not_after_target():
    history = [_record("Star Back", "Kansas City Chiefs", "RB", week=week, carries=week) for week in (3, 4, 6)]

    latest = latest_records(history, 5)
    assert [record.week for record in latest] == [4]


def test_history_feeds_usage_trend():
    history = [
        _record("Star Back", "Kansas City Chiefs", "RB", week=week, carries=10, red_zone_carries=1)
        for week in (2, 3, 4)
    ]
    recs = _engine().build(5, [*history, *VOLUME], MatchupIndex(SCHEDULE, week=5))
    star = recs[0]

    assert star.usage_trend_score == 8.0
    assert "Volume trending up significantly" in star.reasoning


def test_ranking_key_breaks_ties_on_red_zone_then_touches_then_name():
    recs = _engine().build(5, VOLUME, SCHEDULE)
    assert recs == sorted(recs, key=ranking_key)


@pytest.mark.anyio
async def test_recommend_applies_quota():
    selector = QuotaSelector(StaticStatusValidator(), ValidationPolicy(delay_seconds=0))

    result = await _engine().recommend(5, VOLUME, SCHEDULE, selector, max_per_team=1, list_size=2)

    assert [rec.player_name for rec in result.selected] == ["Star Back", "Maybe Receiver"]
    assert result.validated_count == 2


@pytest.mark.anyio
async def test_recommend_with_position_quota():
    selector = QuotaSelector(StaticStatusValidator(), ValidationPolicy(delay_seconds=0))

    result = await _engine().recommend(5, VOLUME, SCHEDULE, selector, quota=get_quota_rules("rushers"))

    assert [rec.player_name for rec in result.selected] == ["Star Back"]


def test_primary_players_keeps_top_scorers_per_team():
    rows = [
        TouchdownRow(player="Alpha", team="Buffalo Bills", value=9),
        TouchdownRow(player="Beta", team="Buffalo Bills", value=4),
        TouchdownRow(player="Gamma", team="Buffalo Bills", value=2),
        TouchdownRow(player="Delta", team="Miami Dolphins", value=6),
        TouchdownRow(player="Zero", team="Miami Dolphins", value=0),
    ]

    assert [row.player for row in primary_players(rows)] == ["Alpha", "Delta", "Beta", "Zero"]
    assert [row.player for row in primary_players(rows, top_n=1)] == ["Alpha", "Delta"]
    assert scorer_names(rows) == ["Alpha", "Beta", "Gamma", "Delta"]


SEASON_TOUCHDOWNS = [
    TouchdownRow(player="Star Back", team="KC", value=9),
    TouchdownRow(player="Deep Threat", team="Buffalo Bills", value=6),
    TouchdownRow(player="Maybe Receiver", team="Denver Broncos", value=4),
    TouchdownRow(player="Hurt Back", team="Miami Dolphins", value=5),
]

ROOKIE_GAMES = [
    TouchdownGame(player_name="Rookie Runner", team="KC", week=3, rushing_touchdowns=2),
    TouchdownGame(player_name="Rookie Runner", team="KC", week=4, rushing_touchdowns=1),
]


def _with_rookie() -> list[PlayerWeekRecord]:
    return [*VOLUME, _record("Rookie Runner", "KC", "RB", carries=9, red_zone_carries=1)]


def test_candidate_pool_is_limited_to_primary_scorers():
    recs = _engine(season_touchdowns=[SEASON_TOUCHDOWNS]).build(5, _with_rookie(), SCHEDULE)

    assert "Rookie Runner" not in {rec.player_name for rec in recs}


def test_breakout_outside_primary_pool_is_synthesized():
    engine = _engine(season_touchdowns=[SEASON_TOUCHDOWNS], touchdown_games=ROOKIE_GAMES)

    recs = engine.build(5, _with_rookie(), SCHEDULE)
    rookie = next(rec for rec in recs if rec.player_name == "Rookie Runner")

    assert rookie.synthesized
    assert rookie.final_score == 9
    assert rookie.team == "Kansas City Chiefs"
    assert rookie.opponent == "Denver Broncos"
    assert recs[0].player_name == "Rookie Runner"


@pytest.mark.anyio
async def test_synthesized_entry_shares_team_cap_with_scored_entries():
    engine = _engine(season_touchdowns=[SEASON_TOUCHDOWNS], touchdown_games=ROOKIE_GAMES)
    selector = QuotaSelector(StaticStatusValidator(), ValidationPolicy(delay_seconds=0))

    result = await engine.recommend(5, _with_rookie(), SCHEDULE, selector, max_per_team=1, list_size=10)

    kansas_city = [rec.player_name for rec in result.selected if rec.team == "Kansas City Chiefs"]
    assert kansas_city == ["Rookie Runner"]


def test_primary_players_groups_by_canonical_team():
    rows = [
        TouchdownRow(player="Alpha", team="KC", value=9),
        TouchdownRow(player="Beta", team="Kansas City Chiefs", value=4),
        TouchdownRow(player="Gamma", team="Chiefs", value=2),
    ]
    engine = _engine()

    assert [row.player for row in primary_players(rows, resolver=engine.resolver)] == ["Alpha", "Beta"]
