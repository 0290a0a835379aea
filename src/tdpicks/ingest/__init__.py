"""Input table loading utilities."""

from .tables import (
    TableFormatError,
    load_defense_table,
    load_game_scripts,
    load_injuries,
    load_schedule,
    load_touchdown_games,
    load_touchdown_table,
    load_volume_table,
    parse_defense_rows,
    parse_game_scripts,
    parse_injury_rows,
    parse_schedule_rows,
    parse_touchdown_games,
    parse_touchdown_rows,
    parse_volume_rows,
    read_rows,
    rows_from_payload,
)

__all__ = [
    "TableFormatError",
    "load_defense_table",
    "load_game_scripts",
    "load_injuries",
    "load_schedule",
    "load_touchdown_games",
    "load_touchdown_table",
    "load_volume_table",
    "parse_defense_rows",
    "parse_game_scripts",
    "parse_injury_rows",
    "parse_schedule_rows",
    "parse_touchdown_games",
    "parse_touchdown_rows",
    "parse_volume_rows",
    "read_rows",
    "rows_from_payload",
]
