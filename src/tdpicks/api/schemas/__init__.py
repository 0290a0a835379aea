"""Pydantic models for API I/O."""

from .mapping import MappingPayload
from .recommendation import (
    EligibilityResponse,
    RecommendationRequest,
    RecommendationResponse,
    RejectedCandidateResponse,
)
from .results import AccuracyResponse, ResultEntry, ResultsPayload, ResultsResponse

__all__ = [
    "AccuracyResponse",
    "EligibilityResponse",
    "MappingPayload",
    "RecommendationRequest",
    "RecommendationResponse",
    "RejectedCandidateResponse",
    "ResultEntry",
    "ResultsPayload",
    "ResultsResponse",
]
