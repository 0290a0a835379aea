from tdpicks.models import DefenseStat, GameScript, PlayerWeekRecord, TouchdownGame
from tdpicks.scoring import defense_score, game_script_score, historical_score, usage_trend_score, volume_score
from tdpicks.scoring.signals import (
    DEFENSE_RANGE,
    GAME_SCRIPT_RANGE,
    USAGE_TREND_RANGE,
    VOLUME_RANGE,
    prior_weeks,
)
from tdpicks.teams import NOT_FOUND


def _record(**overrides) -> PlayerWeekRecord:
    data = {
        "player_name": "Test Receiver",
        "team": "Buffalo Bills",
        "position": "WR",
        "week": 5,
    }
    data.update(overrides)
    return PlayerWeekRecord(**data)


RUSH = {"Miami Dolphins": DefenseStat(team="Miami Dolphins", touchdowns_allowed_per_game=2.0)}
PASS = {
    "Miami Dolphins": DefenseStat(team="Miami Dolphins", touchdowns_allowed_per_game=0.6),
    "Denver Broncos": DefenseStat(team="Denver Broncos", touchdowns_allowed_per_game=1.6),
}


def test_red_zone_targets_outscore_low_volume():
    busy = volume_score(_record(targets=12, red_zone_targets=2))
    quiet = volume_score(_record(targets=4))

    assert busy.score > quiet.score
    assert busy.score == 4.0
    assert busy.reasoning == ("Moderate volume (12 touches)", "Good red zone usage (2 opportunities)")
    assert quiet.score == 0.0
    assert quiet.reasoning == ("Low volume (4 touches)",)


def test_volume_is_clamped_to_ten():
    result = volume_score(_record(position="RB", targets=6, carries=19, red_zone_carries=4))
    assert result.score == 10.0
    assert "Dual-threat usage" in result.reasoning


def test_volume_never_decreases_with_more_usage():
    previous = -1.0
    for touches in range(0, 30):
        score = volume_score(_record(targets=touches, red_zone_targets=touches // 5)).score
        assert score >= previous
        previous = score


def test_rb_uses_rush_table():
    result = defense_score("Miami Dolphins", "RB", RUSH, PASS)
    assert result.score == 7.0
    assert result.reasoning == ("Very Weak rush defense (2.0 TDs/game allowed)",)


def test_receiver_uses_pass_table():
    strong = defense_score("Miami Dolphins", "WR", RUSH, PASS)
    weak = defense_score("Denver Broncos", "TE", RUSH, PASS)

    assert strong.score == DEFENSE_RANGE[0]
    assert strong.reasoning == ("Strong pass defense (0.6 TDs/game allowed)",)
    assert weak.score == 5.0
    assert weak.reasoning[0].startswith("Weak pass defense")


def test_missing_defense_data_is_neutral():
    for opponent in ("Dallas Cowboys", NOT_FOUND, None):
        result = defense_score(opponent, "WR", RUSH, PASS)
        assert result.score == 5.0
        assert result.reasoning == ("No defensive data available",)


def test_game_script_defaults_to_average_context():
    result = game_script_score(None, "WR")
    assert result.score == 6.0
    assert result.reasoning == ("Good scoring game expected (24+ points)",)

    flat = game_script_score(GameScript(team="Buffalo Bills", implied_total=22.0), "WR")
    assert flat.score == 5.0
    assert flat.reasoning == ("Average game script expected",)


def test_game_script_favours_high_totals_and_punishes_rb_underdogs():
    shootout = game_script_score(GameScript(team="x", implied_total=30, spread=7.5, pace=72), "WR")
    assert shootout.score == 9.0

    underdog = GameScript(team="x", implied_total=18, spread=-10, pace=58)
    assert game_script_score(underdog, "RB").score == 1.5
    assert game_script_score(underdog, "WR").score == 2.5
    assert "Heavy underdog (negative RB game script)" in game_script_score(underdog, "RB").reasoning


def test_usage_trend_without_history_is_neutral():
    result = usage_trend_score(_record(targets=8), [])
    assert result.score == 5.0
    assert result.reasoning == ("No trend data available",)


def test_usage_trend_compares_against_prior_three_weeks():
    history = [_record(week=week, targets=10, red_zone_targets=1) for week in (1, 2, 3)]
    history.append(_record(week=0, targets=40))

    rising = _record(week=4, targets=14, red_zone_targets=2)
    falling = _record(week=4, targets=6)

    assert len(prior_weeks(rising, history)) == 3
    assert usage_trend_score(rising, history).score == 8.0
    assert usage_trend_score(falling, history).score == 3.0
    assert usage_trend_score(_record(week=4, targets=10, red_zone_targets=1), history).reasoning == (
        "Stable usage trends",
    )


def test_usage_trend_ignores_other_players():
    history = [_record(player_name="Someone Else", week=3, targets=2)]
    assert usage_trend_score(_record(week=4, targets=20), history).reasoning == ("No trend data available",)


def test_historical_counts_only_trailing_weeks():
    games = [
        TouchdownGame(player_name="Test Receiver", team="Buffalo Bills", week=1, receiving_touchdowns=4),
        TouchdownGame(player_name="Test Receiver", team="Buffalo Bills", week=2, receiving_touchdowns=1),
        TouchdownGame(player_name="Test Receiver", team="Buffalo Bills", week=3, rushing_touchdowns=1),
        TouchdownGame(player_name="Test Receiver", team="Buffalo Bills", week=4, receiving_touchdowns=1),
        TouchdownGame(player_name="Test Receiver", team="Buffalo Bills", week=5, receiving_touchdowns=3),
    ]

    result = historical_score("Test Receiver", 5, games)
    assert result.score == 5.0
    assert result.reasoning == ("Hot recent form (3 TDs in last 3 games)",)
    assert historical_score("Test Receiver", 4, games).score == 5.0
    assert historical_score("Test Receiver", 3, games).reasoning == ("Hot recent form (5 TDs in last 3 games)",)
    assert historical_score("Test Receiver", 6, games).reasoning == ("Hot recent form (5 TDs in last 3 games)",)
    assert historical_score("Nobody", 5, games).reasoning == ("No recent TDs",)
    assert historical_score("Nobody", 5, games).score == 0.0
    single = [TouchdownGame(player_name="Test Receiver", team="Buffalo Bills", week=4, receiving_touchdowns=1)]
    assert historical_score("Test Receiver", 5, single).reasoning == ("Some recent production (1 TD in last 3 games)",)
    double = [single[0].model_copy(update={"receiving_touchdowns": 2})]
    assert historical_score("Test Receiver", 5, double).reasoning == ("Good recent form (2 TDs in last 3 games)",)


def test_scores_stay_within_documented_ranges():
    scripts = [None, GameScript(team="x", implied_total=40, spread=14, pace=80), GameScript(team="x", implied_total=10, spread=-20, pace=50)]
    for record in (_record(), _record(targets=30, carries=30, red_zone_targets=9), _record(position="RB", carries=3)):
        assert VOLUME_RANGE[0] <= volume_score(record).score <= VOLUME_RANGE[1]
        assert DEFENSE_RANGE[0] <= defense_score("Miami Dolphins", record.position, RUSH, PASS).score <= DEFENSE_RANGE[1]
        for script in scripts:
            assert GAME_SCRIPT_RANGE[0] <= game_script_score(script, record.position).score <= GAME_SCRIPT_RANGE[1]
        trend = usage_trend_score(record, [_record(week=4, targets=1)])
        assert USAGE_TREND_RANGE[0] <= trend.score <= USAGE_TREND_RANGE[1]
