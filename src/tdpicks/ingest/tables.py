"""Helpers to load input tables (JSON or CSV) and emit canonical records."""

from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from tdpicks.models import (
    DefenseStat,
    GameScript,
    InjuryStatus,
    Matchup,
    PlayerWeekRecord,
    TouchdownGame,
    TouchdownRow,
)
from tdpicks.teams.matchups import ScheduleError
from tdpicks.teams.resolver import DEFAULT_RESOLVER, TeamNameResolver


logger = logging.getLogger(__name__)


class TableFormatError(ValueError):
    """Raised when a required input table cannot be parsed."""


Row = Mapping[str, Any]

# Column names seen in the wild for each canonical field; an explicit
# mapping entry always wins over these.
_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "player_name": ("player_name", "playerName", "Player", "player", "name", "Name"),
    "team": ("team", "Team"),
    "position": ("position", "Position", "pos", "Pos"),
    "week": ("week", "Week"),
    "targets": ("targets", "Targets", "Tgt"),
    "carries": ("carries", "Carries", "rushAttempts", "Att"),
    "receptions": ("receptions", "Receptions", "Rec"),
    "red_zone_targets": ("red_zone_targets", "redZoneTargets", "RZ Targets"),
    "red_zone_carries": ("red_zone_carries", "redZoneCarries", "RZ Carries"),
    "snap_count": ("snap_count", "snapCount", "snaps", "Snaps"),
    "team_points": ("team_points", "teamPoints"),
    "team_pass_attempts": ("team_pass_attempts", "teamPassAttempts"),
    "team_rush_attempts": ("team_rush_attempts", "teamRushAttempts"),
    "value": ("value", "Value", "touchdowns", "TD", "TDs"),
    "opponent": ("opponent", "Opponent", "opp", "Opp"),
    "rushing_touchdowns": ("rushing_touchdowns", "rushingTDs", "rushingTouchdowns", "Rush TD"),
    "receiving_touchdowns": ("receiving_touchdowns", "receivingTDs", "receivingTouchdowns", "Rec TD"),
    "away_team": ("away_team", "awayTeam", "Away", "away"),
    "home_team": ("home_team", "homeTeam", "Home", "home"),
    "date": ("date", "Date"),
    "time": ("time", "Time"),
    "rank": ("rank", "Rank"),
    "implied_total": ("implied_total", "impliedTotal", "Implied Total"),
    "spread": ("spread", "Spread"),
    "pace": ("pace", "Pace"),
    "status": ("status", "Status", "injury_status", "injuryStatus", "Injury Indicator"),
}

_YEAR_COLUMN = re.compile(r"^\d{4}$")


def _parse_spec(mapping: Optional[Mapping[str, str]], key: str) -> Optional[str | Sequence[str]]:
    spec = (mapping or {}).get(key)
    if spec is None:
        return None
    if isinstance(spec, str) and "|" in spec:
        return tuple(part.strip() for part in spec.split("|"))
    return spec


def _extract(row: Row, key: str, mapping: Optional[Mapping[str, str]] = None) -> Optional[str]:
    spec = _parse_spec(mapping, key)
    if spec is None:
        for candidate in _FIELD_ALIASES.get(key, (key,)):
            value = row.get(candidate)
            if value is not None and str(value).strip() != "":
                return str(value).strip()
        return None
    if isinstance(spec, str):
        value = row.get(spec)
        return str(value).strip() if value is not None else None
    parts = [str(row.get(col, "")).strip() for col in spec if row.get(col)]
    return " ".join(parts) if parts else None


def _parse_int(raw: Optional[str], *, field: str, default: int = 0) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(float(raw))
    except ValueError:
        raise TableFormatError(f"{field} value {raw!r} is not numeric") from None


def _parse_float(raw: Optional[str], *, field: str, default: Optional[float] = None) -> Optional[float]:
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise TableFormatError(f"{field} value {raw!r} is not numeric") from None


def read_rows(path: Path) -> List[Dict[str, Any]]:
    """Read a JSON (``{"rows": [...]}`` or bare list) or CSV table into dict rows."""

    if not path.exists():
        raise TableFormatError(f"table {path} does not exist")
    if path.suffix.lower() == ".csv":
        with path.open(newline="", encoding="utf-8") as f:
            return [dict(row) for row in csv.DictReader(f)]
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise TableFormatError(f"table {path} is not valid JSON: {exc}") from exc
    return rows_from_payload(payload, source=str(path))


def rows_from_payload(payload: Any, *, source: str = "payload") -> List[Dict[str, Any]]:
    if isinstance(payload, Mapping):
        payload = payload.get("rows")
    if not isinstance(payload, list):
        raise TableFormatError(f"{source} must be a list of rows or an object with a 'rows' list")
    rows = []
    for index, row in enumerate(payload):
        if not isinstance(row, Mapping):
            raise TableFormatError(f"{source} row {index} is not an object")
        rows.append(dict(row))
    return rows


def parse_volume_rows(
    rows: Iterable[Row],
    *,
    mapping: Optional[Mapping[str, str]] = None,
    resolver: Optional[TeamNameResolver] = None,
) -> List[PlayerWeekRecord]:
    resolver = resolver or DEFAULT_RESOLVER
    records: List[PlayerWeekRecord] = []
    for row in rows:
        name = _extract(row, "player_name", mapping)
        if not name:
            logger.debug("Skipping volume row without a player name: %s", row)
            continue
        records.append(
            PlayerWeekRecord(
                player_name=name,
                team=resolver.standardize(_extract(row, "team", mapping) or ""),
                position=(_extract(row, "position", mapping) or "").upper(),
                week=_parse_int(_extract(row, "week", mapping), field="week"),
                targets=_parse_int(_extract(row, "targets", mapping), field="targets"),
                carries=_parse_int(_extract(row, "carries", mapping), field="carries"),
                receptions=_parse_int(_extract(row, "receptions", mapping), field="receptions"),
                red_zone_targets=_parse_int(_extract(row, "red_zone_targets", mapping), field="red_zone_targets"),
                red_zone_carries=_parse_int(_extract(row, "red_zone_carries", mapping), field="red_zone_carries"),
                snap_count=_parse_int(_extract(row, "snap_count", mapping), field="snap_count"),
                team_points=_parse_int(_extract(row, "team_points", mapping), field="team_points"),
                team_pass_attempts=_parse_int(
                    _extract(row, "team_pass_attempts", mapping), field="team_pass_attempts"
                ),
                team_rush_attempts=_parse_int(
                    _extract(row, "team_rush_attempts", mapping), field="team_rush_attempts"
                ),
            )
        )
    return records


def parse_touchdown_rows(
    rows: Iterable[Row],
    *,
    mapping: Optional[Mapping[str, str]] = None,
    resolver: Optional[TeamNameResolver] = None,
) -> List[TouchdownRow]:
    resolver = resolver or DEFAULT_RESOLVER
    parsed: List[TouchdownRow] = []
    for row in rows:
        name = _extract(row, "player_name", mapping)
        if not name:
            continue
        parsed.append(
            TouchdownRow(
                player=name,
                team=resolver.standardize(_extract(row, "team", mapping) or ""),
                value=_parse_int(_extract(row, "value", mapping), field="value"),
            )
        )
    return parsed


def parse_touchdown_games(
    rows: Iterable[Row],
    *,
    mapping: Optional[Mapping[str, str]] = None,
    resolver: Optional[TeamNameResolver] = None,
) -> List[TouchdownGame]:
    resolver = resolver or DEFAULT_RESOLVER
    games: List[TouchdownGame] = []
    for row in rows:
        name = _extract(row, "player_name", mapping)
        if not name:
            continue
        opponent = _extract(row, "opponent", mapping)
        games.append(
            TouchdownGame(
                player_name=name,
                team=resolver.standardize(_extract(row, "team", mapping) or ""),
                week=_parse_int(_extract(row, "week", mapping), field="week"),
                opponent=resolver.standardize(opponent) if opponent else None,
                rushing_touchdowns=_parse_int(
                    _extract(row, "rushing_touchdowns", mapping), field="rushing_touchdowns"
                ),
                receiving_touchdowns=_parse_int(
                    _extract(row, "receiving_touchdowns", mapping), field="receiving_touchdowns"
                ),
            )
        )
    return games


def _newest_year_value(row: Row) -> Optional[str]:
    years = sorted((key for key in row if _YEAR_COLUMN.match(str(key))), reverse=True)
    for year in years:
        value = row.get(year)
        if value is not None and str(value).strip() not in {"", "--"}:
            return str(value).strip()
    return None


def parse_defense_rows(
    rows: Iterable[Row],
    *,
    mapping: Optional[Mapping[str, str]] = None,
    resolver: Optional[TeamNameResolver] = None,
) -> Dict[str, DefenseStat]:
    """Index defensive touchdowns-allowed-per-game by canonical team name.

    Without an explicit ``value`` mapping the newest four-digit year column
    that holds a value is used, then any ``value``-like column.
    """

    resolver = resolver or DEFAULT_RESOLVER
    table: Dict[str, DefenseStat] = {}
    for row in rows:
        raw_team = _extract(row, "team", mapping)
        if not raw_team:
            continue
        if mapping and "value" in mapping:
            raw_value = _extract(row, "value", mapping)
        else:
            raw_value = _newest_year_value(row) or _extract(row, "value")
        value = _parse_float(raw_value, field="touchdowns_allowed_per_game")
        if value is None:
            logger.debug("No defensive value for %s", raw_team)
            continue
        rank_raw = _extract(row, "rank", mapping)
        team = resolver.standardize(raw_team)
        table[team] = DefenseStat(
            team=team,
            touchdowns_allowed_per_game=max(0.0, value),
            rank=_parse_int(rank_raw, field="rank") if rank_raw else None,
        )
    return table


def parse_schedule_rows(
    rows: Iterable[Row],
    *,
    week: Optional[int] = None,
    mapping: Optional[Mapping[str, str]] = None,
) -> List[Matchup]:
    matchups: List[Matchup] = []
    for index, row in enumerate(rows):
        away = _extract(row, "away_team", mapping)
        home = _extract(row, "home_team", mapping)
        if not away or not home:
            raise ScheduleError(f"schedule row {index} is missing away_team/home_team")
        try:
            row_week = _parse_int(_extract(row, "week", mapping), field="week", default=-1)
        except TableFormatError as exc:
            raise ScheduleError(f"schedule row {index}: {exc}") from exc
        matchups.append(
            Matchup(
                away_team=away,
                home_team=home,
                week=row_week if row_week >= 0 else week,
                date=_extract(row, "date", mapping),
                time=_extract(row, "time", mapping),
            )
        )
    return matchups


def parse_game_scripts(
    rows: Iterable[Row],
    *,
    resolver: Optional[TeamNameResolver] = None,
) -> Dict[str, GameScript]:
    resolver = resolver or DEFAULT_RESOLVER
    scripts: Dict[str, GameScript] = {}
    for row in rows:
        raw_team = _extract(row, "team")
        if not raw_team:
            continue
        team = resolver.standardize(raw_team)
        scripts[team] = GameScript(
            team=team,
            implied_total=_parse_float(_extract(row, "implied_total"), field="implied_total", default=24.0),
            spread=_parse_float(_extract(row, "spread"), field="spread", default=0.0),
            pace=_parse_float(_extract(row, "pace"), field="pace", default=65.0),
        )
    return scripts


def parse_injury_rows(rows: Iterable[Row]) -> Dict[str, InjuryStatus]:
    statuses: Dict[str, InjuryStatus] = {}
    for row in rows:
        name = _extract(row, "player_name")
        if not name:
            continue
        statuses[name] = InjuryStatus.parse(_extract(row, "status"))
    return statuses


def load_volume_table(path: Path, *, mapping: Optional[Mapping[str, str]] = None) -> List[PlayerWeekRecord]:
    return parse_volume_rows(read_rows(path), mapping=mapping)


def load_touchdown_table(path: Path, *, mapping: Optional[Mapping[str, str]] = None) -> List[TouchdownRow]:
    return parse_touchdown_rows(read_rows(path), mapping=mapping)


def load_touchdown_games(path: Path, *, mapping: Optional[Mapping[str, str]] = None) -> List[TouchdownGame]:
    return parse_touchdown_games(read_rows(path), mapping=mapping)


def load_defense_table(path: Path, *, mapping: Optional[Mapping[str, str]] = None) -> Dict[str, DefenseStat]:
    return parse_defense_rows(read_rows(path), mapping=mapping)


def load_schedule(path: Path, *, week: Optional[int] = None, mapping: Optional[Mapping[str, str]] = None) -> List[Matchup]:
    try:
        rows = read_rows(path)
    except TableFormatError as exc:
        raise ScheduleError(str(exc)) from exc
    return parse_schedule_rows(rows, week=week, mapping=mapping)


def load_game_scripts(path: Path) -> Dict[str, GameScript]:
    return parse_game_scripts(read_rows(path))


def load_injuries(path: Path) -> Dict[str, InjuryStatus]:
    return parse_injury_rows(read_rows(path))
