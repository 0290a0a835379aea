"""Rank-ordered walk enforcing per-team caps and a total list size."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from tdpicks.models import Recommendation
from tdpicks.selection.validator import StatusValidator, ValidationResult


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationPolicy:
    delay_seconds: float = 1.0
    treat_unverified_as_inactive: bool = True


@dataclass(frozen=True)
class SelectionResult:
    selected: List[Recommendation]
    rejected: List[Tuple[Recommendation, ValidationResult]] = field(default_factory=list)
    validated_count: int = 0


def _check_limits(max_per_team: int, total_limit: int) -> None:
    if max_per_team < 1:
        raise ValueError("max_per_team must be at least 1")
    if total_limit < 0:
        raise ValueError("total_limit must not be negative")


def _at_cap(rec: Recommendation, counts: Counter, max_per_team: int) -> bool:
    return counts[rec.team] >= max_per_team


def apply_team_limits(
    recommendations: Sequence[Recommendation],
    max_per_team: int,
    total_limit: int,
) -> List[Recommendation]:
    """Keep candidates in order while their team is under ``max_per_team``."""

    _check_limits(max_per_team, total_limit)
    counts: Counter[str] = Counter()
    selected: List[Recommendation] = []
    for rec in recommendations:
        if len(selected) >= total_limit:
            break
        if _at_cap(rec, counts, max_per_team):
            continue
        selected.append(rec)
        counts[rec.team] += 1
    return selected


class QuotaSelector:
    """Quota walk that validates each candidate before it takes a team slot.

    Validations happen one at a time in rank order; a rejected candidate does
    not consume its team's budget.  ``policy.delay_seconds`` is slept after
    every validation call.
    """

    def __init__(self, validator: StatusValidator, policy: Optional[ValidationPolicy] = None) -> None:
        self.validator = validator
        self.policy = policy or ValidationPolicy()

    def _accepts(self, result: ValidationResult) -> bool:
        if result.is_active:
            return True
        return not result.verified and not self.policy.treat_unverified_as_inactive

    async def select(
        self,
        recommendations: Sequence[Recommendation],
        max_per_team: int,
        total_limit: int,
    ) -> SelectionResult:
        _check_limits(max_per_team, total_limit)
        counts: Counter[str] = Counter()
        selected: List[Recommendation] = []
        rejected: List[Tuple[Recommendation, ValidationResult]] = []
        validated = 0

        for rec in recommendations:
            if len(selected) >= total_limit:
                break
            if _at_cap(rec, counts, max_per_team):
                continue

            result = await self.validator.validate(rec)
            validated += 1
            if self._accepts(result):
                if not result.is_active:
                    rec = rec.model_copy(update={"reasoning": [*rec.reasoning, result.describe()]})
                selected.append(rec)
                counts[rec.team] += 1
            else:
                logger.info("Rejected %s (%s): %s", rec.player_name, rec.team, result.describe())
                rejected.append((rec, result))

            if self.policy.delay_seconds > 0:
                await asyncio.sleep(self.policy.delay_seconds)

        if len(selected) < total_limit:
            logger.info("Candidate pool exhausted with %d of %d slots filled", len(selected), total_limit)
        return SelectionResult(selected=selected, rejected=rejected, validated_count=validated)
