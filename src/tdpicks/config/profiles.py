"""Weighting profiles, tier labels and quota rules used by the scoring engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple


SIGNALS: Tuple[str, ...] = ("volume", "defense", "game_script", "usage_trend", "historical")

_WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class WeightingProfile:
    """Named set of signal weights; weights must sum to 1.0."""

    name: str
    weights: Tuple[Tuple[str, float], ...]

    def __post_init__(self) -> None:
        if not self.weights:
            raise ValueError(f"profile {self.name!r} has no weights")
        seen = set()
        for signal, weight in self.weights:
            if signal not in SIGNALS:
                raise ValueError(f"profile {self.name!r} references unknown signal {signal!r}")
            if signal in seen:
                raise ValueError(f"profile {self.name!r} weights {signal!r} twice")
            if weight < 0:
                raise ValueError(f"profile {self.name!r} has negative weight for {signal!r}")
            seen.add(signal)
        total = sum(weight for _, weight in self.weights)
        if abs(total - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"profile {self.name!r} weights sum to {total:.6f}, expected 1.0")

    @classmethod
    def from_mapping(cls, name: str, weights: Mapping[str, float]) -> "WeightingProfile":
        return cls(name=name, weights=tuple((signal, float(value)) for signal, value in weights.items()))

    def weight_for(self, signal: str) -> float:
        for name, weight in self.weights:
            if name == signal:
                return weight
        return 0.0

    @property
    def signals(self) -> Tuple[str, ...]:
        return tuple(signal for signal, _ in self.weights)


@dataclass(frozen=True)
class TierRule:
    """Composite gate: minimum final score plus optional usage requirements.

    When both ``min_targets`` and ``min_carries`` are set either one is enough.
    """

    label: str
    min_score: int
    min_red_zone_opportunities: int = 0
    min_targets: Optional[int] = None
    min_carries: Optional[int] = None

    def matches(self, final_score: int, *, targets: int, carries: int, red_zone_opportunities: int) -> bool:
        if final_score < self.min_score:
            return False
        if red_zone_opportunities < self.min_red_zone_opportunities:
            return False
        usage_gates = []
        if self.min_targets is not None:
            usage_gates.append(targets >= self.min_targets)
        if self.min_carries is not None:
            usage_gates.append(carries >= self.min_carries)
        return not usage_gates or any(usage_gates)


DEFAULT_TIER = "Dart Throw"

TIER_RULES: Tuple[TierRule, ...] = (
    TierRule(label="Strong Play", min_score=8, min_red_zone_opportunities=2),
    TierRule(label="Solid Play", min_score=6, min_targets=8, min_carries=12),
    TierRule(label="Speculative Play", min_score=5),
)

INJURY_PENALTIES: Mapping[str, int] = {
    "Questionable": 1,
    "Doubtful": 2,
}


@dataclass(frozen=True)
class QuotaRules:
    name: str
    max_per_team: int
    total_limit: int
    positions: frozenset = field(default_factory=frozenset)

    def accepts_position(self, position: str) -> bool:
        return not self.positions or position.strip().upper() in self.positions


_PROFILES: Dict[str, WeightingProfile] = {
    "classic": WeightingProfile(
        name="classic",
        weights=(("volume", 0.6), ("defense", 0.3), ("historical", 0.1)),
    ),
    "enhanced": WeightingProfile(
        name="enhanced",
        weights=(("volume", 0.5), ("defense", 0.25), ("game_script", 0.15), ("usage_trend", 0.1)),
    ),
    "balanced": WeightingProfile(
        name="balanced",
        weights=(
            ("volume", 0.4),
            ("defense", 0.25),
            ("game_script", 0.15),
            ("usage_trend", 0.1),
            ("historical", 0.1),
        ),
    ),
}

_QUOTAS: Dict[str, QuotaRules] = {
    "top20": QuotaRules(name="top20", max_per_team=2, total_limit=20),
    "rushers": QuotaRules(name="rushers", max_per_team=1, total_limit=8, positions=frozenset({"RB", "QB"})),
    "receivers": QuotaRules(
        name="receivers", max_per_team=2, total_limit=17, positions=frozenset({"WR", "TE"})
    ),
}

DEFAULT_PROFILE = "enhanced"
DEFAULT_QUOTA = "top20"


def iter_profiles() -> Iterable[WeightingProfile]:
    """Return an iterator of all registered weighting profiles."""

    return _PROFILES.values()


def get_profile(name: str) -> WeightingProfile:
    """Fetch a profile by name, raising KeyError if missing."""

    key = name.strip().lower()
    if key not in _PROFILES:
        raise KeyError(f"No weighting profile configured with name={name!r}")
    return _PROFILES[key]


def iter_quota_rules() -> Iterable[QuotaRules]:
    return _QUOTAS.values()


def get_quota_rules(name: str) -> QuotaRules:
    key = name.strip().lower()
    if key not in _QUOTAS:
        raise KeyError(f"No quota rules configured with name={name!r}")
    return _QUOTAS[key]
