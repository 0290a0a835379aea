import pytest
from httpx import ASGITransport, AsyncClient

from tdpicks.api import create_app
from tdpicks.selection import StaticStatusValidator
from tdpicks.tracking import PredictionStore


@pytest.fixture
async def client(tmp_path, monkeypatch):
    monkeypatch.setenv("TDPICKS_VALIDATION_DELAY", "0")
    app = create_app(
        store=PredictionStore(tmp_path / "api.sqlite"),
        validator=StaticStatusValidator({"Star Back": False}),
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


def _request_payload(**overrides) -> dict:
    payload = {
        "week": 5,
        "season": 2025,
        "validate_status": False,
        "volume": [
            {"player_name": "Star Back", "team": "KC", "position": "RB", "week": 5, "targets": 4, "carries": 18, "red_zone_carries": 3},
            {"player_name": "Second Back", "team": "KC", "position": "RB", "week": 5, "carries": 12, "red_zone_carries": 2},
            {"player_name": "Deep Threat", "team": "BUF", "position": "WR", "week": 5, "targets": 9, "red_zone_targets": 1},
            {"player_name": "Hurt Back", "team": "MIA", "position": "RB", "week": 5, "carries": 16, "red_zone_carries": 2},
        ],
        "schedule": [
            {"away_team": "Buffalo Bills", "home_team": "Miami Dolphins"},
            {"away_team": "Kansas City Chiefs", "home_team": "Denver Broncos"},
        ],
        "rush_defense": [{"team": "DEN", "2025": 2.0}],
        "injuries": [{"player": "Hurt Back", "status": "Out"}],
    }
    payload.update(overrides)
    return payload


@pytest.mark.anyio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_recommendations_are_ranked_and_saved(client):
    response = await client.post("/recommendations", json=_request_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["profile"] == "enhanced"
    assert [rec["player_name"] for rec in body["recommendations"]] == ["Star Back", "Second Back", "Deep Threat"]
    assert body["recommendations"][0]["tier"] == "Strong Play"
    assert body["eligibility"]["ruled_out"] == ["Hurt Back"]
    assert body["run_id"]

    run = await client.get(f"/runs/{body['run_id']}")
    assert run.status_code == 200
    assert run.json()["count"] == 3
    assert run.json()["recommendations"][0]["rank"] == 1


@pytest.mark.anyio
async def test_quota_from_request(client):
    response = await client.post("/recommendations", json=_request_payload(max_per_team=1, list_size=5))

    names = [rec["player_name"] for rec in response.json()["recommendations"]]
    assert names == ["Star Back", "Deep Threat"]


@pytest.mark.anyio
async def test_status_validation_rejects_inactive_players(client):
    response = await client.post(
        "/recommendations",
        json=_request_payload(validate_status=True, max_per_team=1, save=False),
    )

    body = response.json()
    assert [rec["player_name"] for rec in body["recommendations"]] == ["Second Back", "Deep Threat"]
    assert body["rejected"][0]["player_name"] == "Star Back"
    assert body["validated_count"] == 3
    assert body["run_id"] is None


@pytest.mark.anyio
async def test_status_is_validated_unless_disabled(client):
    payload = _request_payload(save=False)
    del payload["validate_status"]

    body = (await client.post("/recommendations", json=payload)).json()

    assert "Star Back" not in [rec["player_name"] for rec in body["recommendations"]]
    assert body["rejected"][0]["player_name"] == "Star Back"


@pytest.mark.anyio
async def test_season_tables_limit_candidates(client):
    tables = [
        [{"Player": "Star Back", "Team": "KC", "Value": 9}, {"Player": "Hurt Back", "Team": "MIA", "Value": 4}],
        [{"Player": "Deep Threat", "Team": "BUF", "Value": 7}],
    ]

    body = (await client.post("/recommendations", json=_request_payload(season_touchdowns=tables, save=False))).json()

    assert [rec["player_name"] for rec in body["recommendations"]] == ["Star Back", "Deep Threat"]


@pytest.mark.anyio
async def test_unknown_profile_is_bad_request(client):
    response = await client.post("/recommendations", json=_request_payload(profile="aggressive"))
    assert response.status_code == 400


@pytest.mark.anyio
async def test_invalid_schedule_is_bad_request(client):
    schedule = [
        {"away_team": "Buffalo Bills", "home_team": "Miami Dolphins"},
        {"away_team": "BUF", "home_team": "New York Jets"},
    ]
    response = await client.post("/recommendations", json=_request_payload(schedule=schedule))
    assert response.status_code == 400
    assert "more than one matchup" in response.json()["detail"]


@pytest.mark.anyio
async def test_empty_volume_returns_message(client):
    response = await client.post("/recommendations", json=_request_payload(volume=[]))

    body = response.json()
    assert response.status_code == 200
    assert body["recommendations"] == []
    assert body["message"] == "No eligible recommendations for this week"
    assert body["run_id"] is None


@pytest.mark.anyio
async def test_results_export_and_accuracy(client):
    created = (await client.post("/recommendations", json=_request_payload())).json()
    run_id = created["run_id"]

    results = await client.post(
        f"/runs/{run_id}/results",
        json={
            "results": [
                {"player": "Star Back", "team": "Kansas City Chiefs", "scored_touchdown": True},
                {"player": "Deep Threat", "team": "BUF", "scored_touchdown": False},
            ]
        },
    )
    assert results.status_code == 200
    assert results.json() == {"run_id": run_id, "updated": 2}

    runs = (await client.get("/runs")).json()
    assert runs[0]["results_recorded"] == 2
    assert runs[0]["hits"] == 1

    export = await client.get(f"/runs/{run_id}/export.csv")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert export.text.splitlines()[1].startswith("1,Star Back,Kansas City Chiefs")

    accuracy = (await client.get("/accuracy")).json()
    assert accuracy["total"] == 2
    assert accuracy["accuracy"] == pytest.approx(50.0)


@pytest.mark.anyio
async def test_unknown_run_is_404(client):
    assert (await client.get("/runs/nope")).status_code == 404
    assert (await client.get("/runs/nope/export.csv")).status_code == 404
    response = await client.post("/runs/nope/results", json={"results": []})
    assert response.status_code == 404
