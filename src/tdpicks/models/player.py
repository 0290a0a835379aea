"""Canonical player/team records shared across ingestion, scoring and selection."""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class InjuryStatus(str, Enum):
    ACTIVE = "Active"
    QUESTIONABLE = "Questionable"
    DOUBTFUL = "Doubtful"
    OUT = "Out"
    IR = "IR"

    @classmethod
    def parse(cls, value: Optional[str]) -> "InjuryStatus":
        """Map free-form injury report text onto the status enum."""

        if value is None:
            return cls.ACTIVE
        text = value.strip().lower()
        if not text or text in {"active", "healthy", "probable", "none"}:
            return cls.ACTIVE
        if text in {"q", "questionable"}:
            return cls.QUESTIONABLE
        if text in {"d", "doubtful"}:
            return cls.DOUBTFUL
        if text in {"o", "out", "inactive", "suspended"}:
            return cls.OUT
        if text in {"ir", "injured reserve", "pup", "il", "inj"}:
            return cls.IR
        return cls.ACTIVE

    @property
    def is_ruled_out(self) -> bool:
        return self in {InjuryStatus.OUT, InjuryStatus.IR}


class PlayerWeekRecord(BaseModel):
    """One player's usage for one week; consumed read-only by the scorers."""

    player_name: str = Field(..., min_length=1)
    team: str
    position: str
    week: int = Field(..., ge=0)
    targets: int = Field(default=0, ge=0)
    carries: int = Field(default=0, ge=0)
    receptions: int = Field(default=0, ge=0)
    red_zone_targets: int = Field(default=0, ge=0)
    red_zone_carries: int = Field(default=0, ge=0)
    snap_count: int = Field(default=0, ge=0)
    team_points: int = Field(default=0, ge=0)
    team_pass_attempts: int = Field(default=0, ge=0)
    team_rush_attempts: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def touches(self) -> int:
        return self.targets + self.carries

    @property
    def red_zone_opportunities(self) -> int:
        return self.red_zone_targets + self.red_zone_carries

    @property
    def target_share(self) -> float:
        if self.team_pass_attempts <= 0:
            return 0.0
        return self.targets / self.team_pass_attempts

    @property
    def touch_share(self) -> float:
        if self.team_rush_attempts <= 0:
            return 0.0
        return self.carries / self.team_rush_attempts

    @property
    def red_zone_share(self) -> float:
        team_plays = self.team_pass_attempts + self.team_rush_attempts
        if team_plays <= 0:
            return 0.0
        return self.red_zone_opportunities / team_plays

    @property
    def is_running_back(self) -> bool:
        return self.position.strip().upper() == "RB"


class TouchdownRow(BaseModel):
    """Season touchdown table entry (`{Player, Team, Value}`)."""

    player: str = Field(..., min_length=1)
    team: str
    value: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class TouchdownGame(BaseModel):
    """Single player-game touchdown line from the weekly touchdown history."""

    player_name: str = Field(..., min_length=1)
    team: str
    week: int = Field(..., ge=0)
    opponent: Optional[str] = None
    rushing_touchdowns: int = Field(default=0, ge=0)
    receiving_touchdowns: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def total_touchdowns(self) -> int:
        return self.rushing_touchdowns + self.receiving_touchdowns


class DefenseStat(BaseModel):
    team: str
    touchdowns_allowed_per_game: float = Field(..., ge=0.0)
    rank: Optional[int] = None

    model_config = ConfigDict(frozen=True)


class Matchup(BaseModel):
    away_team: str
    home_team: str
    week: Optional[int] = None
    date: Optional[str] = None
    time: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class GameScript(BaseModel):
    """Sportsbook context for one team; spread is positive when favoured."""

    team: str
    implied_total: float = 24.0
    spread: float = 0.0
    pace: float = 65.0

    model_config = ConfigDict(frozen=True)


class SignalScore(BaseModel):
    score: float
    reasoning: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


class Recommendation(BaseModel):
    """Scored player-week; replaced via ``model_copy`` rather than mutated."""

    player_name: str
    team: str
    opponent: str
    position: str
    volume_score: float = 0.0
    defense_score: float = 0.0
    game_script_score: float = 0.0
    usage_trend_score: float = 0.0
    historical_score: float = 0.0
    final_score: int = Field(default=0, ge=0, le=10)
    tier: str = "Dart Throw"
    eligibility: str = "Eligible"
    injury_status: InjuryStatus = InjuryStatus.ACTIVE
    targets: int = 0
    carries: int = 0
    red_zone_opportunities: int = 0
    reasoning: List[str] = Field(default_factory=list)
    boosted: bool = False
    synthesized: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def touches(self) -> int:
        return self.targets + self.carries


def normalize_player_name(name: str) -> str:
    """Lower-case and strip punctuation so name variants compare equal."""

    return " ".join(re.sub(r"[^a-z0-9 ]+", "", name.lower()).split())
