"""REST API for the touchdown recommendation engine."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Optional

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from tdpicks.api.schemas import (
    AccuracyResponse,
    EligibilityResponse,
    RecommendationRequest,
    RecommendationResponse,
    RejectedCandidateResponse,
    ResultsPayload,
    ResultsResponse,
)
from tdpicks.config import get_profile, get_quota_rules, load_settings
from tdpicks.export import export_recommendations_to_csv, recommendations_payload
from tdpicks.ingest import (
    parse_defense_rows,
    parse_game_scripts,
    parse_injury_rows,
    parse_schedule_rows,
    parse_touchdown_games,
    parse_touchdown_rows,
    parse_volume_rows,
)
from tdpicks.scoring import RecommendationEngine, VeteranRegistry
from tdpicks.selection import (
    QuotaSelector,
    RosterStatusValidator,
    SelectionResult,
    StaticStatusValidator,
    StatusValidator,
    ValidationPolicy,
)
from tdpicks.teams import MatchupIndex
from tdpicks.tracking import ActualResult, PredictionStore, RunRecord


logger = logging.getLogger(__name__)

ROSTER_TIMEOUT_SECONDS = 10.0


def run_record_to_dict(run: RunRecord) -> dict[str, Any]:
    payload = recommendations_payload(
        run.recommendations,
        week=run.week,
        season=run.season,
        profile=run.profile,
    )
    for row, prediction in zip(payload["recommendations"], run.predictions):
        row["actual"] = prediction.actual
    payload["run_id"] = run.run_id
    payload["created_at"] = run.created_at.isoformat()
    return payload


def run_summary(run: RunRecord) -> dict[str, Any]:
    recorded = [prediction for prediction in run.predictions if prediction.actual is not None]
    return {
        "run_id": run.run_id,
        "week": run.week,
        "season": run.season,
        "profile": run.profile,
        "created_at": run.created_at.isoformat(),
        "count": len(run.predictions),
        "results_recorded": len(recorded),
        "hits": sum(1 for prediction in recorded if prediction.actual),
    }


def _selection_to_response(
    request: RecommendationRequest,
    profile: str,
    engine: RecommendationEngine,
    selection: SelectionResult,
    run_id: Optional[str],
) -> RecommendationResponse:
    report = engine.last_report
    return RecommendationResponse(
        run_id=run_id,
        week=request.week,
        season=request.season,
        profile=profile,
        recommendations=selection.selected,
        rejected=[
            RejectedCandidateResponse(
                player_name=rec.player_name,
                team=rec.team,
                status=result.status,
                verified=result.verified,
                reason=result.reason,
            )
            for rec, result in selection.rejected
        ],
        validated_count=selection.validated_count,
        eligibility=EligibilityResponse(**asdict(report)) if report else None,
        message=None if selection.selected else "No eligible recommendations for this week",
    )


def create_app(
    store: Optional[PredictionStore] = None,
    validator: Optional[StatusValidator] = None,
) -> FastAPI:
    app = FastAPI(title="tdpicks")
    settings = load_settings()
    store = store or PredictionStore(settings.db_path)
    app.state.prediction_store = store
    app.state.status_validator = validator

    def _fetch_run_or_404(run_id: str) -> RunRecord:
        run = store.get_run(run_id)
        if run is None:
            raise HTTPException(status_code=404, detail="Run not found")
        return run

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/recommendations", response_model=RecommendationResponse)
    async def create_recommendations(request: RecommendationRequest):
        runtime = load_settings()
        try:
            profile = get_profile(request.profile or runtime.profile)
            quota = get_quota_rules(request.quota) if request.quota else None
        except KeyError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        mappings = request.mappings
        try:
            volume = parse_volume_rows(request.volume, mapping=mappings.volume_mapping or None)
            schedule = parse_schedule_rows(
                request.schedule,
                week=request.week,
                mapping=mappings.schedule_mapping or None,
            )
            index = MatchupIndex(schedule, week=request.week)
            engine = RecommendationEngine(
                rush_defense=parse_defense_rows(request.rush_defense, mapping=mappings.defense_mapping or None),
                pass_defense=parse_defense_rows(request.pass_defense, mapping=mappings.defense_mapping or None),
                profile=profile,
                game_scripts=parse_game_scripts(request.game_scripts),
                injuries=parse_injury_rows(request.injuries),
                touchdown_games=parse_touchdown_games(
                    request.touchdown_games, mapping=mappings.touchdown_mapping or None
                ),
                season_touchdowns=[parse_touchdown_rows(table) for table in request.season_touchdowns],
                prior_scorers=request.prior_scorers,
                veterans=VeteranRegistry(request.veterans),
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        limits = {
            "max_per_team": request.max_per_team or runtime.max_per_team,
            "list_size": request.list_size or runtime.list_size,
            "quota": quota,
        }

        if not request.validate_status:
            selector = QuotaSelector(StaticStatusValidator(), ValidationPolicy(delay_seconds=0))
            selection = await engine.recommend(request.week, volume, index, selector, **limits)
        elif app.state.status_validator is not None:
            selector = QuotaSelector(
                app.state.status_validator,
                ValidationPolicy(delay_seconds=runtime.validation_delay),
            )
            selection = await engine.recommend(request.week, volume, index, selector, **limits)
        else:
            async with httpx.AsyncClient(timeout=ROSTER_TIMEOUT_SECONDS) as client:
                selector = QuotaSelector(
                    RosterStatusValidator(client, base_url=runtime.roster_url),
                    ValidationPolicy(delay_seconds=runtime.validation_delay),
                )
                selection = await engine.recommend(request.week, volume, index, selector, **limits)

        run_id = None
        if request.save and selection.selected:
            run = store.save_week(request.week, request.season, selection.selected, profile=profile.name)
            run_id = run.run_id
            logger.info("Stored week %s list as run %s", request.week, run_id)
        return _selection_to_response(request, profile.name, engine, selection, run_id)

    @app.get("/runs")
    async def list_runs(limit: int = 50):
        return [run_summary(run) for run in store.list_runs(limit=limit)]

    @app.get("/runs/{run_id}")
    async def get_run(run_id: str):
        return run_record_to_dict(_fetch_run_or_404(run_id))

    @app.post("/runs/{run_id}/results", response_model=ResultsResponse)
    async def record_results(run_id: str, payload: ResultsPayload):
        run = _fetch_run_or_404(run_id)
        updated = store.record_results(
            run.week,
            run.season,
            [
                ActualResult(player=entry.player, team=entry.team, scored_touchdown=entry.scored_touchdown)
                for entry in payload.results
            ],
        )
        return ResultsResponse(run_id=run_id, updated=updated)

    @app.get("/runs/{run_id}/export.csv")
    async def export_csv(run_id: str):
        run = _fetch_run_or_404(run_id)
        csv_text = export_recommendations_to_csv(run.recommendations)
        return Response(
            content=csv_text,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={run_id}.csv"},
        )

    @app.get("/accuracy", response_model=AccuracyResponse)
    async def accuracy():
        return AccuracyResponse(**asdict(store.accuracy()))

    return app


