import csv
import json
import sys
from pathlib import Path

import pytest

from tdpicks import cli


def _write(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _inputs(tmp_path: Path) -> dict:
    return {
        "volume": _write(
            tmp_path / "volume.json",
            {
                "rows": [
                    {"Player": "Star Back", "Team": "KC", "Pos": "RB", "Week": 5, "Carries": 18, "Targets": 4, "RZ Carries": 3},
                    {"Player": "Deep Threat", "Team": "BUF", "Pos": "WR", "Week": 5, "Targets": 9, "RZ Targets": 1},
                ]
            },
        ),
        "schedule": _write(
            tmp_path / "schedule.json",
            [{"Away": "Bills", "Home": "Dolphins"}, {"Away": "Chiefs", "Home": "Broncos"}],
        ),
        "rush": _write(tmp_path / "rush.json", [{"Team": "Denver", "2025": "2.0"}]),
    }


def test_cli_writes_csv_and_json(tmp_path: Path, monkeypatch, capsys):
    files = _inputs(tmp_path)
    output = tmp_path / "picks.csv"
    payload = tmp_path / "picks.json"
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "tdpicks",
            "--week", "5",
            "--volume", str(files["volume"]),
            "--schedule", str(files["schedule"]),
            "--rush-defense", str(files["rush"]),
            "--output", str(output),
            "--json", str(payload),
            "--no-validate",
        ],
    )

    cli.main()

    rows = list(csv.reader(output.open(encoding="utf-8")))
    assert [row[1] for row in rows[1:]] == ["Star Back", "Deep Threat"]
    data = json.loads(payload.read_text(encoding="utf-8"))
    assert data["week"] == 5
    assert data["profile"] == "enhanced"
    out = capsys.readouterr().out
    assert "Loaded 2 volume rows and 2 matchups for week 5" in out
    assert " 1. Star Back (Kansas City Chiefs) vs Denver Broncos: 8 Strong Play" in out


def test_cli_rejects_bad_schedule(tmp_path: Path, monkeypatch):
    files = _inputs(tmp_path)
    _write(files["schedule"], [{"Away": "Bills"}])
    monkeypatch.setattr(
        sys,
        "argv",
        ["tdpicks", "--week", "5", "--volume", str(files["volume"]), "--schedule", str(files["schedule"])],
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main()
    assert "missing away_team/home_team" in str(excinfo.value)


def test_parse_mapping():
    assert cli._parse_mapping(["player_name=Player", " team = Tm "]) == {"player_name": "Player", "team": "Tm"}
    with pytest.raises(ValueError):
        cli._parse_mapping(["player_name"])


@pytest.mark.parametrize("flag", ["--max-per-team", "--list-size"])
def test_cli_rejects_non_positive_limits(tmp_path: Path, monkeypatch, capsys, flag):
    files = _inputs(tmp_path)
    monkeypatch.setattr(
        sys,
        "argv",
        ["tdpicks", "--week", "5", "--volume", str(files["volume"]), "--schedule", str(files["schedule"]), flag, "0"],
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main()
    assert excinfo.value.code == 2
    assert f"{flag} must be at least 1" in capsys.readouterr().err


def test_cli_limits_candidates_to_season_scorers(tmp_path: Path, monkeypatch):
    files = _inputs(tmp_path)
    receiving = _write(tmp_path / "receiving.json", {"rows": [{"Player": "Deep Threat", "Team": "Buffalo Bills", "Value": 7}]})
    output = tmp_path / "picks.csv"
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "tdpicks",
            "--week", "5",
            "--volume", str(files["volume"]),
            "--schedule", str(files["schedule"]),
            "--season-touchdowns", str(receiving),
            "--output", str(output),
            "--no-validate",
        ],
    )

    cli.main()

    rows = list(csv.reader(output.open(encoding="utf-8")))
    assert [row[1] for row in rows[1:]] == ["Deep Threat"]
