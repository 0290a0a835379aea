from __future__ import annotations

from pydantic import BaseModel, Field


class MappingPayload(BaseModel):
    volume_mapping: dict[str, str] = Field(default_factory=dict)
    touchdown_mapping: dict[str, str] = Field(default_factory=dict)
    defense_mapping: dict[str, str] = Field(default_factory=dict)
    schedule_mapping: dict[str, str] = Field(default_factory=dict)
