"""JSON payload and CSV export helpers for recommendation lists."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Any, Dict, List, Sequence

from tdpicks.models import Recommendation


class RecommendationExportError(RuntimeError):
    """Raised when a recommendation list cannot be exported."""


CSV_HEADERS: tuple[str, ...] = (
    "Rank",
    "Player",
    "Team",
    "Opponent",
    "Position",
    "Final Score",
    "Tier",
    "Volume",
    "Defense",
    "Game Script",
    "Usage Trend",
    "Historical",
    "Targets",
    "Carries",
    "Red Zone Opps",
    "Injury Status",
    "Boosted",
    "Reasoning",
)


def recommendations_payload(
    recommendations: Sequence[Recommendation],
    *,
    week: int | None = None,
    season: int | None = None,
    profile: str | None = None,
) -> Dict[str, Any]:
    rows: List[Dict[str, Any]] = []
    for rank, rec in enumerate(recommendations, start=1):
        row = rec.model_dump(mode="json")
        row["rank"] = rank
        rows.append(row)
    return {
        "week": week,
        "season": season,
        "profile": profile,
        "count": len(rows),
        "recommendations": rows,
    }


def export_recommendations_to_csv(
    recommendations: Sequence[Recommendation],
    *,
    entry_names: Sequence[str] | None = None,
) -> str:
    """Render recommendations as CSV, one row per player in rank order.

    ``entry_names`` replaces the numeric rank column when given.
    """

    if entry_names is not None and len(entry_names) != len(recommendations):
        raise RecommendationExportError("entry_names length must match recommendations length")

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)

    for idx, rec in enumerate(recommendations):
        rank = entry_names[idx] if entry_names is not None else idx + 1
        writer.writerow(
            [
                rank,
                rec.player_name,
                rec.team,
                rec.opponent,
                rec.position,
                rec.final_score,
                rec.tier,
                f"{rec.volume_score:g}",
                f"{rec.defense_score:g}",
                f"{rec.game_script_score:g}",
                f"{rec.usage_trend_score:g}",
                f"{rec.historical_score:g}",
                rec.targets,
                rec.carries,
                rec.red_zone_opportunities,
                rec.injury_status.value,
                "yes" if rec.boosted else "",
                "; ".join(rec.reasoning),
            ]
        )

    return buffer.getvalue()


__all__ = [
    "CSV_HEADERS",
    "RecommendationExportError",
    "export_recommendations_to_csv",
    "recommendations_payload",
]
