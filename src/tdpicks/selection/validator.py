"""Active-status checks run for each candidate during the quota walk."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

import httpx

from tdpicks.config.settings import DEFAULT_ROSTER_URL
from tdpicks.models import Recommendation
from tdpicks.teams.resolver import DEFAULT_RESOLVER, TeamNameResolver


logger = logging.getLogger(__name__)

# Roster endpoints key a few teams differently from the usual abbreviation.
_ROSTER_CODES: Mapping[str, str] = {
    "Washington Commanders": "wsh",
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one status check.

    ``verified`` is False when the status could not be determined at all
    (network or payload failure), as opposed to a confirmed inactive player.
    """

    player_name: str
    is_active: bool
    status: str
    verified: bool = True
    expected_team: Optional[str] = None
    current_team: Optional[str] = None
    position: Optional[str] = None
    reason: Optional[str] = None

    @property
    def team_changed(self) -> bool:
        return bool(self.current_team and self.expected_team and self.current_team != self.expected_team)

    def describe(self) -> str:
        if not self.verified:
            return f"Active status could not be verified ({self.status})"
        if self.is_active:
            return "Active status confirmed"
        return f"Inactive: {self.reason or self.status}"


class StatusValidator(Protocol):
    async def validate(self, recommendation: Recommendation) -> ValidationResult:
        ...


def _normalize_name(name: str) -> str:
    return re.sub(r"['.\-]", "", name.lower()).strip()


def names_match(first: str, second: str) -> bool:
    left = _normalize_name(first)
    right = _normalize_name(second)
    if not left or not right:
        return False
    if left == right:
        return True
    return all(part in right for part in left.split()) or all(part in left for part in right.split())


def _is_active_status(status: Any) -> bool:
    if not status:
        return True
    if isinstance(status, str):
        return status.strip().lower() == "active"
    status_id = status.get("id")
    status_name = str(status.get("name") or status.get("type") or "").lower()
    # anything other than an explicit active marker counts as inactive
    return str(status_id) == "1" or status_name == "active"


def find_player(payload: Any, player_name: str) -> Optional[Dict[str, Any]]:
    """Depth-first search of a roster payload for an athlete object matching ``player_name``."""

    if isinstance(payload, list):
        for item in payload:
            found = find_player(item, player_name)
            if found is not None:
                return found
        return None
    if not isinstance(payload, dict):
        return None

    name = payload.get("displayName") or payload.get("fullName")
    if not name and isinstance(payload.get("name"), str) and "position" in payload:
        name = payload["name"]
    if isinstance(name, str) and names_match(name, player_name):
        return payload

    for value in payload.values():
        if isinstance(value, (dict, list)):
            found = find_player(value, player_name)
            if found is not None:
                return found
    return None


def _nested_label(value: Any, *keys: str) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in keys:
            label = value.get(key)
            if isinstance(label, str) and label:
                return label
    return None


class RosterStatusValidator:
    """Look players up on their team's public roster feed."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        resolver: Optional[TeamNameResolver] = None,
        base_url: str = DEFAULT_ROSTER_URL,
    ) -> None:
        self.client = client
        self.resolver = resolver or DEFAULT_RESOLVER
        self.base_url = base_url.rstrip("/")

    def roster_url(self, team: str) -> Optional[str]:
        identity = self.resolver.identity(team)
        if identity is None:
            return None
        code = _ROSTER_CODES.get(identity.canonical, identity.abbreviations[0].lower())
        return f"{self.base_url}/teams/{code}/roster"

    async def validate(self, recommendation: Recommendation) -> ValidationResult:
        player_name = recommendation.player_name
        expected = self.resolver.standardize(recommendation.team)
        url = self.roster_url(recommendation.team)
        if url is None:
            return ValidationResult(
                player_name=player_name,
                is_active=False,
                status="Unknown Team",
                verified=False,
                expected_team=expected,
                reason=f"Cannot map {recommendation.team!r} to a roster",
            )

        try:
            response = await self.client.get(url)
        except httpx.HTTPError as exc:
            logger.warning("Roster check for %s failed: %s", player_name, exc)
            return ValidationResult(
                player_name=player_name,
                is_active=False,
                status="Check Failed",
                verified=False,
                expected_team=expected,
                reason=f"Roster check failed: {exc}",
            )

        if response.status_code >= 400:
            logger.warning("Roster API returned %s for %s", response.status_code, url)
            return ValidationResult(
                player_name=player_name,
                is_active=False,
                status="API Error",
                verified=False,
                expected_team=expected,
                reason=f"Roster API failed: {response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            return ValidationResult(
                player_name=player_name,
                is_active=False,
                status="Check Failed",
                verified=False,
                expected_team=expected,
                reason=f"Roster payload unreadable: {exc}",
            )

        athlete = find_player(payload, player_name)
        if athlete is None:
            abbreviation = self.resolver.abbreviation(expected)
            return ValidationResult(
                player_name=player_name,
                is_active=False,
                status="Not on Roster",
                expected_team=expected,
                reason=f"Not found on {abbreviation} roster",
            )

        raw_status = athlete.get("status")
        status_label = _nested_label(raw_status, "name", "type") or "Active"
        team_label = _nested_label(athlete.get("team"), "displayName", "name")
        current_team = self.resolver.standardize(team_label) if team_label else expected
        active = _is_active_status(raw_status)
        result = ValidationResult(
            player_name=player_name,
            is_active=active,
            status=status_label,
            expected_team=expected,
            current_team=current_team,
            position=_nested_label(athlete.get("position"), "abbreviation", "name"),
            reason=None if active else f"Status: {status_label}",
        )
        if result.team_changed:
            logger.info("%s now listed with %s (expected %s)", player_name, current_team, expected)
        return result


class StaticStatusValidator:
    """Validator backed by a fixed ``name -> active`` mapping; unknown names use ``default``."""

    def __init__(
        self,
        statuses: Optional[Mapping[str, Union[bool, ValidationResult]]] = None,
        *,
        default: bool = True,
    ) -> None:
        self._statuses = {_normalize_name(name): value for name, value in (statuses or {}).items()}
        self.default = default
        self.calls: List[str] = []

    async def validate(self, recommendation: Recommendation) -> ValidationResult:
        self.calls.append(recommendation.player_name)
        value = self._statuses.get(_normalize_name(recommendation.player_name), self.default)
        if isinstance(value, ValidationResult):
            return value
        return ValidationResult(
            player_name=recommendation.player_name,
            is_active=bool(value),
            status="Active" if value else "Inactive",
            expected_team=recommendation.team,
            reason=None if value else "Marked inactive",
        )
