"""SQLite store of weekly recommendation runs and their actual outcomes."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import uuid4

from tdpicks.config.settings import DB_PATH_ENV
from tdpicks.models import Recommendation
from tdpicks.teams.resolver import DEFAULT_RESOLVER, TeamNameResolver


logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".tdpicks" / "tdpicks.sqlite"


@dataclass(frozen=True)
class ActualResult:
    player: str
    team: str
    scored_touchdown: bool


@dataclass
class PredictionRecord:
    rank: int
    recommendation: Recommendation
    actual: Optional[bool] = None


@dataclass
class RunRecord:
    run_id: str
    created_at: datetime
    week: int
    season: int
    profile: Optional[str]
    predictions: List[PredictionRecord] = field(default_factory=list)

    @property
    def recommendations(self) -> List[Recommendation]:
        return [prediction.recommendation for prediction in self.predictions]


@dataclass(frozen=True)
class AccuracyStats:
    total: int
    correct: int
    accuracy: float
    top5_accuracy: float
    top10_accuracy: float


def _parse_dt(value: str) -> datetime:
    return datetime.fromisoformat(value)


class PredictionStore:
    """Simple SQLite-backed store for weekly recommendation lists."""

    def __init__(self, db_path: Path | str | None = None, resolver: Optional[TeamNameResolver] = None):
        self.resolver = resolver or DEFAULT_RESOLVER
        self._use_uri = False
        env_db = os.getenv(DB_PATH_ENV)
        if db_path is not None:
            self.db_path: Path | str = Path(db_path) if not str(db_path).startswith("file:") else str(db_path)
            self._use_uri = isinstance(self.db_path, str)
        elif env_db:
            if env_db.startswith("file:"):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif os.getenv("PYTEST_CURRENT_TEST"):
            test_dir = Path(tempfile.gettempdir()) / "tdpicks-test"
            test_dir.mkdir(parents=True, exist_ok=True)
            self.db_path = test_dir / "tdpicks.sqlite"
        else:
            self.db_path = DEFAULT_DB_PATH
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "tdpicks-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                fallback = fallback_dir / "tdpicks.sqlite"
                logger.warning("Cannot open %s; falling back to %s", self.db_path, fallback)
                conn = sqlite3.connect(fallback)
                self.db_path = fallback
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS runs (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                week INTEGER NOT NULL,
                season INTEGER NOT NULL,
                profile TEXT,
                UNIQUE (week, season)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS predictions (
                run_id TEXT NOT NULL REFERENCES runs(id) ON DELETE CASCADE,
                rank INTEGER NOT NULL,
                player_name TEXT NOT NULL,
                team TEXT NOT NULL,
                opponent TEXT NOT NULL,
                recommendation_json TEXT NOT NULL,
                actual INTEGER,
                PRIMARY KEY (run_id, rank)
            )
            """
        )
        conn.commit()

    def _find_run_id(self, conn: sqlite3.Connection, week: int, season: int) -> Optional[str]:
        row = conn.execute(
            "SELECT id FROM runs WHERE week = ? AND season = ?",
            (week, season),
        ).fetchone()
        return row["id"] if row else None

    def save_week(
        self,
        week: int,
        season: int,
        recommendations: Sequence[Recommendation],
        *,
        profile: Optional[str] = None,
    ) -> RunRecord:
        """Store a week's list; re-saving keeps results already recorded for the same player/opponent."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            run_id = self._find_run_id(conn, week, season)
            preserved: Dict[Tuple[str, str], Optional[bool]] = {}
            if run_id is None:
                run_id = uuid4().hex
                conn.execute(
                    "INSERT INTO runs (id, created_at, week, season, profile) VALUES (?, ?, ?, ?, ?)",
                    (run_id, now.isoformat(), week, season, profile),
                )
            else:
                for row in conn.execute(
                    "SELECT player_name, opponent, actual FROM predictions WHERE run_id = ?",
                    (run_id,),
                ):
                    if row["actual"] is not None:
                        preserved[(row["player_name"], row["opponent"])] = bool(row["actual"])
                conn.execute("DELETE FROM predictions WHERE run_id = ?", (run_id,))
                conn.execute(
                    "UPDATE runs SET created_at = ?, profile = ? WHERE id = ?",
                    (now.isoformat(), profile, run_id),
                )
                logger.info("Replacing stored list for week %s %s (%d results kept)", week, season, len(preserved))

            for rank, rec in enumerate(recommendations, start=1):
                actual = preserved.get((rec.player_name, rec.opponent))
                conn.execute(
                    """
                    INSERT INTO predictions (
                        run_id, rank, player_name, team, opponent, recommendation_json, actual
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        run_id,
                        rank,
                        rec.player_name,
                        rec.team,
                        rec.opponent,
                        json.dumps(rec.model_dump(mode="json")),
                        None if actual is None else int(actual),
                    ),
                )
            conn.commit()
        record = self.get_run(run_id)
        if record is None:
            raise RuntimeError(f"run {run_id} vanished after save")
        return record

    def _team_matches(self, reported: str, predicted: str) -> bool:
        if self.resolver.is_same_team(reported, predicted):
            return True
        return predicted.lower() in reported.lower()

    def record_results(self, week: int, season: int, results: Iterable[ActualResult]) -> int:
        """Mark stored predictions as hits or misses; returns the number updated."""

        results = list(results)
        with self._connect() as conn:
            run_id = self._find_run_id(conn, week, season)
            if run_id is None:
                raise KeyError(f"No stored recommendations for week {week} season {season}")
            rows = conn.execute(
                "SELECT rank, player_name, team FROM predictions WHERE run_id = ? ORDER BY rank",
                (run_id,),
            ).fetchall()
            updated = 0
            for row in rows:
                name = row["player_name"].lower()
                match = next(
                    (
                        result
                        for result in results
                        if name in result.player.lower() and self._team_matches(result.team, row["team"])
                    ),
                    None,
                )
                if match is None:
                    continue
                conn.execute(
                    "UPDATE predictions SET actual = ? WHERE run_id = ? AND rank = ?",
                    (int(match.scored_touchdown), run_id, row["rank"]),
                )
                updated += 1
            conn.commit()
        logger.info("Recorded %d results for week %s %s", updated, week, season)
        return updated

    def accuracy(self) -> AccuracyStats:
        total = correct = top5 = top10 = 0
        with self._connect() as conn:
            weeks = conn.execute("SELECT COUNT(*) AS n FROM runs").fetchone()["n"]
            for row in conn.execute("SELECT rank, actual FROM predictions WHERE actual IS NOT NULL"):
                total += 1
                if row["actual"]:
                    correct += 1
                    if row["rank"] <= 5:
                        top5 += 1
                    if row["rank"] <= 10:
                        top10 += 1
        if total == 0:
            return AccuracyStats(total=0, correct=0, accuracy=0.0, top5_accuracy=0.0, top10_accuracy=0.0)
        return AccuracyStats(
            total=total,
            correct=correct,
            accuracy=correct / total * 100,
            top5_accuracy=top5 / min(total, weeks * 5) * 100,
            top10_accuracy=top10 / min(total, weeks * 10) * 100,
        )

    def get_run(self, run_id: str) -> Optional[RunRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM runs WHERE id = ?", (run_id,)).fetchone()
            if row is None:
                return None
            predictions = conn.execute(
                "SELECT * FROM predictions WHERE run_id = ? ORDER BY rank",
                (run_id,),
            ).fetchall()
        return self._row_to_record(row, predictions)

    def get_week(self, week: int, season: int) -> Optional[RunRecord]:
        with self._connect() as conn:
            run_id = self._find_run_id(conn, week, season)
        return self.get_run(run_id) if run_id else None

    def list_runs(self, limit: int = 50) -> List[RunRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id FROM runs ORDER BY season DESC, week DESC LIMIT ?",
                (limit,),
            ).fetchall()
        records = [self.get_run(row["id"]) for row in rows]
        return [record for record in records if record is not None]

    def _row_to_record(self, row: sqlite3.Row, predictions: Iterable[sqlite3.Row]) -> RunRecord:
        return RunRecord(
            run_id=row["id"],
            created_at=_parse_dt(row["created_at"]),
            week=row["week"],
            season=row["season"],
            profile=row["profile"],
            predictions=[
                PredictionRecord(
                    rank=prediction["rank"],
                    recommendation=Recommendation.model_validate(json.loads(prediction["recommendation_json"])),
                    actual=None if prediction["actual"] is None else bool(prediction["actual"]),
                )
                for prediction in predictions
            ],
        )


__all__ = [
    "AccuracyStats",
    "ActualResult",
    "PredictionRecord",
    "PredictionStore",
    "RunRecord",
]
