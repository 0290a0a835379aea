"""Team name normalisation across schedule, stat and roster sources."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeamIdentity:
    canonical: str
    city: str
    mascot: str
    short_name: str
    abbreviations: Tuple[str, ...]
    aliases: Tuple[str, ...] = ()

    def variants(self) -> Tuple[str, ...]:
        return (
            self.canonical,
            self.city,
            self.mascot,
            self.short_name,
            *self.abbreviations,
            *self.aliases,
        )


def _team(
    canonical: str,
    city: str,
    short_name: str,
    abbreviations: Iterable[str],
    aliases: Iterable[str] = (),
    *,
    city_alias: bool = True,
) -> TeamIdentity:
    mascot = canonical[len(city):].strip()
    extra = tuple(aliases)
    identity = TeamIdentity(
        canonical=canonical,
        city=city if city_alias else "",
        mascot=mascot,
        short_name=short_name,
        abbreviations=tuple(abbreviations),
        aliases=extra,
    )
    return identity


NFL_TEAMS: Tuple[TeamIdentity, ...] = (
    # AFC East
    _team("Buffalo Bills", "Buffalo", "Buffalo", ("BUF", "BUFF")),
    _team("Miami Dolphins", "Miami", "Miami", ("MIA",), ("Fins",)),
    _team("New England Patriots", "New England", "New England", ("NE", "NWE", "NEP"), ("Pats",)),
    _team("New York Jets", "New York", "NY Jets", ("NYJ",), ("NY Jets", "N.Y. Jets"), city_alias=False),
    # AFC North
    _team("Baltimore Ravens", "Baltimore", "Baltimore", ("BAL", "BALT")),
    _team("Cincinnati Bengals", "Cincinnati", "Cincinnati", ("CIN", "CINC")),
    _team("Cleveland Browns", "Cleveland", "Cleveland", ("CLE", "CLEV")),
    _team("Pittsburgh Steelers", "Pittsburgh", "Pittsburgh", ("PIT", "PITT")),
    # AFC South
    _team("Houston Texans", "Houston", "Houston", ("HOU",)),
    _team("Indianapolis Colts", "Indianapolis", "Indianapolis", ("IND", "INDY"), ("Indy",)),
    _team("Jacksonville Jaguars", "Jacksonville", "Jacksonville", ("JAX", "JAC"), ("Jags",)),
    _team("Tennessee Titans", "Tennessee", "Tennessee", ("TEN",)),
    # AFC West
    _team("Denver Broncos", "Denver", "Denver", ("DEN",)),
    _team("Kansas City Chiefs", "Kansas City", "Kansas City", ("KC", "KAN", "KCC")),
    _team(
        "Las Vegas Raiders",
        "Las Vegas",
        "Las Vegas",
        ("LV", "LVR", "OAK"),
        ("Oakland Raiders", "Oakland"),
    ),
    _team(
        "Los Angeles Chargers",
        "Los Angeles",
        "LA Chargers",
        ("LAC", "LACH", "SD", "SDG"),
        ("LA Chargers", "San Diego Chargers", "San Diego"),
        city_alias=False,
    ),
    # NFC East
    _team("Dallas Cowboys", "Dallas", "Dallas", ("DAL",)),
    _team("New York Giants", "New York", "NY Giants", ("NYG",), ("NY Giants", "N.Y. Giants"), city_alias=False),
    _team("Philadelphia Eagles", "Philadelphia", "Philadelphia", ("PHI", "PHILA")),
    _team(
        "Washington Commanders",
        "Washington",
        "Washington",
        ("WAS", "WSH"),
        ("Washington Football Team", "Washington Redskins", "Redskins"),
    ),
    # NFC North
    _team("Chicago Bears", "Chicago", "Chicago", ("CHI",)),
    _team("Detroit Lions", "Detroit", "Detroit", ("DET",)),
    _team("Green Bay Packers", "Green Bay", "Green Bay", ("GB", "GNB"), ("Pack",)),
    _team("Minnesota Vikings", "Minnesota", "Minnesota", ("MIN",), ("Vikes",)),
    # NFC South
    _team("Atlanta Falcons", "Atlanta", "Atlanta", ("ATL",)),
    _team("Carolina Panthers", "Carolina", "Carolina", ("CAR",)),
    _team("New Orleans Saints", "New Orleans", "New Orleans", ("NO", "NOR", "NOS")),
    _team("Tampa Bay Buccaneers", "Tampa Bay", "Tampa Bay", ("TB", "TAM", "TBB"), ("Bucs", "Tampa")),
    # NFC West
    _team("Arizona Cardinals", "Arizona", "Arizona", ("ARI", "ARZ"), ("Cards",)),
    _team(
        "Los Angeles Rams",
        "Los Angeles",
        "LA Rams",
        ("LAR", "STL"),
        ("LA Rams", "St. Louis Rams", "St Louis"),
        city_alias=False,
    ),
    _team("San Francisco 49ers", "San Francisco", "San Francisco", ("SF", "SFO"), ("Niners", "SF 49ers")),
    _team("Seattle Seahawks", "Seattle", "Seattle", ("SEA",), ("Hawks",)),
)

# City strings shared by two franchises never resolve on their own.
AMBIGUOUS_NAMES = frozenset({"new york", "ny", "los angeles", "la"})

_STRIP_CHARS = re.compile(r"[.'’]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TRAILING_NOISE = re.compile(
    r"\s+(?:football team|football club|football|fc|d st|dst|def|defense)$"
)
_CONTAINMENT_MIN_LENGTH = 4


def normalize_team_text(value: str) -> str:
    """Lower-case, drop punctuation and trailing team-unit noise, collapse spaces."""

    lowered = _STRIP_CHARS.sub("", value.lower())
    cleaned = _NON_ALNUM.sub(" ", lowered).strip()
    cleaned = " ".join(cleaned.split())
    previous = None
    while previous != cleaned:
        previous = cleaned
        cleaned = _TRAILING_NOISE.sub("", cleaned).strip()
    return cleaned


def _build_alias_lookup(teams: Iterable[TeamIdentity]) -> Dict[str, TeamIdentity]:
    lookup: Dict[str, TeamIdentity] = {}
    for identity in teams:
        for variant in identity.variants():
            if not variant:
                continue
            key = normalize_team_text(variant)
            if not key or key in AMBIGUOUS_NAMES:
                continue
            existing = lookup.setdefault(key, identity)
            if existing.canonical != identity.canonical:
                raise ValueError(
                    f"alias {variant!r} maps to both {existing.canonical!r} and {identity.canonical!r}"
                )
    return lookup


class TeamNameResolver:
    """Resolve arbitrary team strings to a canonical full name.

    Lookup order is exact alias match, then substring containment in both
    directions against alias keys ordered longest first (ties alphabetical).
    Keys shorter than four characters only ever match exactly so that
    abbreviations such as ``NO`` or ``SF`` never fire inside other words.
    Strings that cannot be resolved are returned unchanged.
    """

    def __init__(self, teams: Iterable[TeamIdentity] = NFL_TEAMS):
        self._teams: Tuple[TeamIdentity, ...] = tuple(teams)
        self._lookup = _build_alias_lookup(self._teams)
        self._by_canonical: Dict[str, TeamIdentity] = {
            team.canonical: team for team in self._teams
        }
        self._containment_keys: List[str] = sorted(
            (key for key in self._lookup if len(key) >= _CONTAINMENT_MIN_LENGTH),
            key=lambda key: (-len(key), key),
        )

    @property
    def lookup(self) -> Mapping[str, TeamIdentity]:
        return self._lookup

    def identity(self, raw: Optional[str]) -> Optional[TeamIdentity]:
        if raw is None:
            return None
        normalized = normalize_team_text(raw)
        if not normalized or normalized in AMBIGUOUS_NAMES:
            return None

        exact = self._lookup.get(normalized)
        if exact is not None:
            return exact

        for key in self._containment_keys:
            if key in normalized:
                return self._lookup[key]
        if len(normalized) >= _CONTAINMENT_MIN_LENGTH:
            for key in self._containment_keys:
                if normalized in key:
                    return self._lookup[key]
        return None

    def standardize(self, raw: str) -> str:
        identity = self.identity(raw)
        if identity is None:
            if raw and raw.strip():
                logger.debug("Unrecognized team name %r; leaving unchanged", raw)
            return raw
        return identity.canonical

    def is_known(self, raw: str) -> bool:
        return self.identity(raw) is not None

    def is_same_team(self, first: str, second: str) -> bool:
        left = self.identity(first)
        right = self.identity(second)
        if left is None or right is None:
            return False
        return left.canonical == right.canonical

    def abbreviation(self, raw: str) -> str:
        identity = self.identity(raw)
        return identity.abbreviations[0] if identity else raw

    def short_name(self, raw: str) -> str:
        identity = self.identity(raw)
        return identity.short_name if identity else raw

    def variations(self, raw: str) -> List[str]:
        identity = self.identity(raw)
        if identity is None:
            return [raw]
        return [variant for variant in identity.variants() if variant]

    def all_teams(self) -> Tuple[str, ...]:
        return tuple(team.canonical for team in self._teams)

    def get(self, canonical: str) -> TeamIdentity:
        if canonical not in self._by_canonical:
            raise KeyError(f"No team configured with canonical name {canonical!r}")
        return self._by_canonical[canonical]


DEFAULT_RESOLVER = TeamNameResolver()


def standardize(raw: str) -> str:
    """Resolve ``raw`` with the built-in NFL alias table."""

    return DEFAULT_RESOLVER.standardize(raw)
