from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ResultEntry(BaseModel):
    player: str = Field(..., min_length=1)
    team: str
    scored_touchdown: bool


class ResultsPayload(BaseModel):
    results: List[ResultEntry]


class ResultsResponse(BaseModel):
    run_id: str
    updated: int


class AccuracyResponse(BaseModel):
    total: int
    correct: int
    accuracy: float
    top5_accuracy: float
    top10_accuracy: float
