from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, Field

from tdpicks.models import Recommendation

from .mapping import MappingPayload


class RecommendationRequest(BaseModel):
    week: int = Field(..., ge=1, le=22)
    season: int = Field(default=2025, ge=1920)
    profile: str | None = None
    quota: str | None = None
    max_per_team: int | None = Field(default=None, ge=1)
    list_size: int | None = Field(default=None, ge=1, le=100)
    validate_status: bool = True
    save: bool = True
    volume: List[dict[str, Any]] = Field(default_factory=list)
    schedule: List[dict[str, Any]] = Field(default_factory=list)
    rush_defense: List[dict[str, Any]] = Field(default_factory=list)
    pass_defense: List[dict[str, Any]] = Field(default_factory=list)
    game_scripts: List[dict[str, Any]] = Field(default_factory=list)
    injuries: List[dict[str, Any]] = Field(default_factory=list)
    touchdown_games: List[dict[str, Any]] = Field(default_factory=list)
    season_touchdowns: List[List[dict[str, Any]]] = Field(default_factory=list)
    prior_scorers: List[str] = Field(default_factory=list)
    veterans: List[str] = Field(default_factory=list)
    mappings: MappingPayload = Field(default_factory=MappingPayload)


class RejectedCandidateResponse(BaseModel):
    player_name: str
    team: str
    status: str
    verified: bool
    reason: str | None = None


class EligibilityResponse(BaseModel):
    total: int
    kept: int
    on_bye: List[str] = Field(default_factory=list)
    ruled_out: List[str] = Field(default_factory=list)


class RecommendationResponse(BaseModel):
    run_id: str | None = None
    week: int
    season: int
    profile: str
    recommendations: List[Recommendation]
    rejected: List[RejectedCandidateResponse] = Field(default_factory=list)
    validated_count: int = 0
    eligibility: EligibilityResponse | None = None
    message: str | None = None
