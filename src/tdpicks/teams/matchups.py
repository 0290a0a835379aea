"""Weekly schedule index answering "who does this team play?"."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple, Union

from tdpicks.models import Matchup
from tdpicks.teams.resolver import DEFAULT_RESOLVER, TeamNameResolver, normalize_team_text


logger = logging.getLogger(__name__)


class ScheduleError(ValueError):
    """Raised when a schedule cannot be indexed for a single week."""


class _NotFound:
    """Falsy marker for "no opponent this week"; distinct from ``None``."""

    _instance: Optional["_NotFound"] = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()

Opponent = Union[str, _NotFound]

_SHARED_CITIES = ("new york", "los angeles")
_MULTI_WORD_CITIES = (
    "san francisco",
    "kansas city",
    "green bay",
    "tampa bay",
    "new england",
    "new orleans",
    "las vegas",
)
_CITY_SHORTHAND = {"ny": "new york", "la": "los angeles"}


def team_key(name: str) -> str:
    """Coarse matching key: the city, plus the mascot for cities with two teams."""

    text = normalize_team_text(name)
    if not text:
        return ""
    first, _, rest = text.partition(" ")
    if first in _CITY_SHORTHAND:
        text = f"{_CITY_SHORTHAND[first]} {rest}".strip()

    for city in _SHARED_CITIES:
        if text.startswith(city):
            remainder = text[len(city):].split()
            return f"{city} {remainder[-1]}" if remainder else city
    for city in _MULTI_WORD_CITIES:
        if text.startswith(city):
            return city
    return text.split()[0]


class MatchupIndex:
    """Opponent lookup for one week of games.

    Teams are compared through the resolver first; a coarse city key is the
    fallback for strings the alias table does not know.  Each team may
    appear in at most one matchup, otherwise :class:`ScheduleError` is raised.
    """

    def __init__(
        self,
        matchups: Iterable[Matchup],
        resolver: Optional[TeamNameResolver] = None,
        week: Optional[int] = None,
    ) -> None:
        self.resolver = resolver or DEFAULT_RESOLVER
        self.week = week
        self._matchups: Tuple[Matchup, ...] = tuple(
            matchup
            for matchup in matchups
            if week is None or matchup.week is None or matchup.week == week
        )
        self._opponents: Dict[str, str] = {}
        self._home: Dict[str, bool] = {}
        self._by_key: Dict[str, Optional[str]] = {}

        for matchup in self._matchups:
            away = self.resolver.standardize(matchup.away_team).strip()
            home = self.resolver.standardize(matchup.home_team).strip()
            if not away or not home:
                raise ScheduleError(f"Matchup is missing a team: {matchup!r}")
            if away == home:
                raise ScheduleError(f"Team {away!r} cannot play itself")
            for team, opponent, is_home in ((away, home, False), (home, away, True)):
                if team in self._opponents:
                    raise ScheduleError(
                        f"{team!r} appears in more than one matchup for week {week}"
                    )
                self._opponents[team] = opponent
                self._home[team] = is_home
                self._register_key(team)

    def _register_key(self, canonical: str) -> None:
        key = team_key(canonical)
        if not key:
            return
        existing = self._by_key.get(key)
        if key in self._by_key and existing != canonical:
            # two teams share the coarse key; only exact resolution can tell them apart
            self._by_key[key] = None
        else:
            self._by_key[key] = canonical

    def _lookup(self, team: str) -> Optional[str]:
        canonical = self.resolver.standardize(team).strip()
        if canonical in self._opponents:
            return canonical
        return self._by_key.get(team_key(team))

    def __len__(self) -> int:
        return len(self._matchups)

    @property
    def matchups(self) -> Tuple[Matchup, ...]:
        return self._matchups

    def opponent_of(self, team: str) -> Opponent:
        if not team or not team.strip():
            return NOT_FOUND
        found = self._lookup(team)
        if found is None:
            logger.debug("No opponent for %r in week %s", team, self.week)
            return NOT_FOUND
        return self._opponents[found]

    def is_home(self, team: str) -> bool:
        found = self._lookup(team) if team else None
        return bool(found and self._home[found])

    def playing_teams(self) -> Tuple[str, ...]:
        return tuple(sorted(self._opponents))

    def bye_teams(self) -> Tuple[str, ...]:
        playing = set(self._opponents)
        return tuple(sorted(team for team in self.resolver.all_teams() if team not in playing))

    def is_on_bye(self, team: str) -> bool:
        return self.resolver.standardize(team) in self.bye_teams()


__all__ = [
    "MatchupIndex",
    "NOT_FOUND",
    "Opponent",
    "ScheduleError",
    "team_key",
]
