from collections import Counter

import pytest

from tdpicks.models import Recommendation
from tdpicks.selection import (
    QuotaSelector,
    StaticStatusValidator,
    ValidationPolicy,
    ValidationResult,
    apply_team_limits,
)
from tdpicks.teams import DEFAULT_RESOLVER


def _rec(name: str, team: str, score: int = 5) -> Recommendation:
    return Recommendation(player_name=name, team=team, opponent="Opponent", position="WR", final_score=score)


def _stacked_candidates() -> list[Recommendation]:
    """Top five from one team followed by twenty players from twenty other teams."""

    others = [team for team in DEFAULT_RESOLVER.all_teams() if team != "Kansas City Chiefs"][:20]
    stacked = [_rec(f"Chief {i}", "Kansas City Chiefs", 10) for i in range(5)]
    rest = [_rec(f"Player {i}", team, 8) for i, team in enumerate(others)]
    return stacked + rest


def _no_delay() -> ValidationPolicy:
    return ValidationPolicy(delay_seconds=0)


@pytest.mark.anyio
async def test_one_per_team_back_fills_from_later_ranks():
    candidates = _stacked_candidates()
    validator = StaticStatusValidator()

    result = await QuotaSelector(validator, _no_delay()).select(candidates, max_per_team=1, total_limit=10)

    names = [rec.player_name for rec in result.selected]
    assert len(names) == 10
    assert names == ["Chief 0"] + [f"Player {i}" for i in range(9)]
    assert Counter(rec.team for rec in result.selected)["Kansas City Chiefs"] == 1
    # capped candidates are skipped before any status check
    assert validator.calls == names
    assert result.validated_count == 10


@pytest.mark.anyio
async def test_rejected_candidate_does_not_use_team_slot():
    candidates = [
        _rec("Benched", "Kansas City Chiefs", 9),
        _rec("Starter", "Kansas City Chiefs", 8),
        _rec("Backup", "Kansas City Chiefs", 7),
        _rec("Third", "Kansas City Chiefs", 6),
    ]
    validator = StaticStatusValidator({"Benched": False})

    result = await QuotaSelector(validator, _no_delay()).select(candidates, max_per_team=2, total_limit=5)

    assert [rec.player_name for rec in result.selected] == ["Starter", "Backup"]
    assert [(rec.player_name, check.status) for rec, check in result.rejected] == [("Benched", "Inactive")]
    assert validator.calls == ["Benched", "Starter", "Backup"]


@pytest.mark.anyio
async def test_unverified_status_excluded_by_default():
    unverified = ValidationResult(player_name="Ghost", is_active=False, status="Check Failed", verified=False)
    candidates = [_rec("Ghost", "Buffalo Bills", 9), _rec("Real", "Miami Dolphins", 8)]

    strict = await QuotaSelector(StaticStatusValidator({"Ghost": unverified}), _no_delay()).select(
        candidates, max_per_team=2, total_limit=5
    )
    assert [rec.player_name for rec in strict.selected] == ["Real"]
    assert strict.rejected[0][1].status == "Check Failed"

    lenient_policy = ValidationPolicy(delay_seconds=0, treat_unverified_as_inactive=False)
    lenient = await QuotaSelector(StaticStatusValidator({"Ghost": unverified}), lenient_policy).select(
        candidates, max_per_team=2, total_limit=5
    )
    assert [rec.player_name for rec in lenient.selected] == ["Ghost", "Real"]
    assert lenient.selected[0].reasoning[-1] == "Active status could not be verified (Check Failed)"
    assert lenient.rejected == []


@pytest.mark.anyio
async def test_exhausted_pool_returns_short_list():
    candidates = [_rec("Only", "Buffalo Bills")]
    result = await QuotaSelector(StaticStatusValidator(), _no_delay()).select(candidates, max_per_team=2, total_limit=20)
    assert [rec.player_name for rec in result.selected] == ["Only"]


@pytest.mark.anyio
async def test_quota_never_exceeded():
    candidates = _stacked_candidates() * 2
    for max_per_team in (1, 2, 3):
        result = await QuotaSelector(StaticStatusValidator(), _no_delay()).select(
            candidates, max_per_team=max_per_team, total_limit=15
        )
        assert len(result.selected) <= 15
        assert max(Counter(rec.team for rec in result.selected).values()) <= max_per_team


@pytest.mark.anyio
async def test_invalid_limits_raise():
    selector = QuotaSelector(StaticStatusValidator(), _no_delay())
    with pytest.raises(ValueError):
        await selector.select([], max_per_team=0, total_limit=5)
    with pytest.raises(ValueError):
        await selector.select([], max_per_team=1, total_limit=-1)


def test_apply_team_limits_without_validation():
    selected = apply_team_limits(_stacked_candidates(), max_per_team=2, total_limit=10)

    assert [rec.player_name for rec in selected[:2]] == ["Chief 0", "Chief 1"]
    assert len(selected) == 10
    assert apply_team_limits(_stacked_candidates(), max_per_team=1, total_limit=0) == []
