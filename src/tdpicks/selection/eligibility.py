"""Bye-week and injury predicates applied before the quota walk."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from tdpicks.models import InjuryStatus, Recommendation, normalize_player_name
from tdpicks.teams.resolver import DEFAULT_RESOLVER, TeamNameResolver


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibilityReport:
    total: int
    kept: int
    on_bye: Tuple[str, ...] = ()
    ruled_out: Tuple[str, ...] = ()

    @property
    def dropped(self) -> int:
        return self.total - self.kept


class EligibilityFilter:
    def __init__(
        self,
        bye_teams: Iterable[str] = (),
        injury_lookup: Optional[Mapping[str, InjuryStatus]] = None,
        resolver: Optional[TeamNameResolver] = None,
    ) -> None:
        self.resolver = resolver or DEFAULT_RESOLVER
        self._bye = {self.resolver.standardize(team) for team in bye_teams}
        self._injuries = {
            normalize_player_name(name): status for name, status in (injury_lookup or {}).items()
        }

    def injury_status(self, player_name: str) -> InjuryStatus:
        return self._injuries.get(normalize_player_name(player_name), InjuryStatus.ACTIVE)

    def is_on_bye(self, team: str) -> bool:
        return self.resolver.standardize(team) in self._bye

    def is_ruled_out(self, player_name: str) -> bool:
        return self.injury_status(player_name).is_ruled_out

    def filter(self, recommendations: Sequence[Recommendation]) -> Tuple[List[Recommendation], EligibilityReport]:
        kept: List[Recommendation] = []
        on_bye: List[str] = []
        ruled_out: List[str] = []
        for rec in recommendations:
            if self.is_on_bye(rec.team):
                logger.info("Dropping %s (%s): team on bye", rec.player_name, rec.team)
                on_bye.append(rec.player_name)
                continue
            status = self.injury_status(rec.player_name)
            if status.is_ruled_out:
                logger.info("Dropping %s (%s): injury status %s", rec.player_name, rec.team, status.value)
                ruled_out.append(rec.player_name)
                continue
            kept.append(rec)

        report = EligibilityReport(
            total=len(recommendations),
            kept=len(kept),
            on_bye=tuple(on_bye),
            ruled_out=tuple(ruled_out),
        )
        return kept, report
