"""Command-line interface for the weekly touchdown recommendation run."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

import httpx

from tdpicks.config import get_profile, get_quota_rules, iter_quota_rules, load_settings
from tdpicks.config_loader import MappingProfile
from tdpicks.export import export_recommendations_to_csv, recommendations_payload
from tdpicks.ingest import (
    TableFormatError,
    load_defense_table,
    load_game_scripts,
    load_injuries,
    load_schedule,
    load_touchdown_games,
    load_touchdown_table,
    load_volume_table,
)
from tdpicks.scoring import RecommendationEngine, VeteranRegistry, scorer_names
from tdpicks.selection import (
    QuotaSelector,
    RosterStatusValidator,
    SelectionResult,
    StaticStatusValidator,
    ValidationPolicy,
)
from tdpicks.teams import MatchupIndex, ScheduleError
from tdpicks.tracking import PredictionStore


def _parse_args() -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Rank likely touchdown scorers for an NFL week")
    parser.add_argument("--week", type=int, required=True, help="Week to generate recommendations for")
    parser.add_argument("--season", type=int, default=2025, help="Season year (used for tracking)")
    parser.add_argument("--volume", type=Path, required=True, help="Per-player weekly volume table (JSON/CSV)")
    parser.add_argument("--schedule", type=Path, required=True, help="Weekly matchups table (JSON/CSV)")
    parser.add_argument("--rush-defense", type=Path, default=None, help="Rushing TDs allowed per game table")
    parser.add_argument("--pass-defense", type=Path, default=None, help="Passing TDs allowed per game table")
    parser.add_argument("--game-scripts", type=Path, default=None, help="Implied totals / spread / pace table")
    parser.add_argument("--injuries", type=Path, default=None, help="Injury report table")
    parser.add_argument("--touchdowns", type=Path, default=None, help="Current-season per-game touchdown history")
    parser.add_argument(
        "--prior-touchdowns",
        type=Path,
        default=None,
        help="Prior-season touchdown table used for breakout detection",
    )
    parser.add_argument(
        "--season-touchdowns",
        type=Path,
        action="append",
        default=[],
        help="Season touchdown table (rushing or receiving); each limits candidates to the top two scorers per team",
    )
    parser.add_argument("--veterans", type=Path, default=None, help="Veteran exclusion list (JSON or text)")
    parser.add_argument("--profile", default=settings.profile, help="Weighting profile (classic, enhanced, balanced)")
    parser.add_argument("--max-per-team", type=int, default=settings.max_per_team, help="Maximum players per team")
    parser.add_argument("--list-size", type=int, default=settings.list_size, help="Number of recommendations")
    parser.add_argument(
        "--quota",
        choices=sorted(rules.name for rules in iter_quota_rules()),
        default=None,
        help="Named quota preset (overrides --max-per-team/--list-size and limits positions)",
    )
    parser.add_argument(
        "--no-validate",
        dest="validate",
        action="store_false",
        help="Skip the roster-feed active status check (every candidate is treated as active)",
    )
    parser.add_argument(
        "--volume-column",
        action="append",
        default=[],
        help="Mapping for volume table columns (e.g., player_name=Player)",
    )
    parser.add_argument("--load-profile", type=Path, help="Load column mapping JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save column mapping JSON", default=None)
    parser.add_argument("--output", type=Path, default=Path("recommendations.csv"), help="Output CSV path")
    parser.add_argument("--json", type=Path, default=None, help="Optional path to write the JSON payload")
    parser.add_argument("--save", action="store_true", help="Store the list in the tracking database")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    args = parser.parse_args()
    if args.max_per_team < 1:
        parser.error("--max-per-team must be at least 1")
    if args.list_size < 1:
        parser.error("--list-size must be at least 1")
    return args


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


async def _select(
    engine: RecommendationEngine,
    args: argparse.Namespace,
    volume,
    index: MatchupIndex,
) -> SelectionResult:
    settings = load_settings()
    quota = get_quota_rules(args.quota) if args.quota else None
    if not args.validate:
        selector = QuotaSelector(StaticStatusValidator(), ValidationPolicy(delay_seconds=0))
        return await engine.recommend(
            args.week,
            volume,
            index,
            selector,
            max_per_team=args.max_per_team,
            list_size=args.list_size,
            quota=quota,
        )
    async with httpx.AsyncClient(timeout=10.0) as client:
        selector = QuotaSelector(
            RosterStatusValidator(client, base_url=settings.roster_url),
            ValidationPolicy(delay_seconds=settings.validation_delay),
        )
        return await engine.recommend(
            args.week,
            volume,
            index,
            selector,
            max_per_team=args.max_per_team,
            list_size=args.list_size,
            quota=quota,
        )


def main() -> None:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    volume_mapping = _parse_mapping(args.volume_column)
    mappings = MappingProfile.load(args.load_profile) if args.load_profile else MappingProfile()
    mappings.volume_mapping = mappings.volume_mapping | volume_mapping
    if args.save_profile:
        mappings.save(args.save_profile)
        print(f"Saved mapping profile to {args.save_profile}")

    try:
        profile = get_profile(args.profile)
        volume = load_volume_table(args.volume, mapping=mappings.volume_mapping or None)
        schedule = load_schedule(args.schedule, week=args.week, mapping=mappings.schedule_mapping or None)
        index = MatchupIndex(schedule, week=args.week)
        defense_mapping = mappings.defense_mapping or None
        engine = RecommendationEngine(
            rush_defense=load_defense_table(args.rush_defense, mapping=defense_mapping) if args.rush_defense else None,
            pass_defense=load_defense_table(args.pass_defense, mapping=defense_mapping) if args.pass_defense else None,
            profile=profile,
            game_scripts=load_game_scripts(args.game_scripts) if args.game_scripts else None,
            injuries=load_injuries(args.injuries) if args.injuries else None,
            touchdown_games=(
                load_touchdown_games(args.touchdowns, mapping=mappings.touchdown_mapping or None)
                if args.touchdowns
                else ()
            ),
            season_touchdowns=[load_touchdown_table(path) for path in args.season_touchdowns],
            prior_scorers=scorer_names(load_touchdown_table(args.prior_touchdowns)) if args.prior_touchdowns else (),
            veterans=VeteranRegistry.load(args.veterans) if args.veterans else None,
        )
    except KeyError as exc:
        raise SystemExit(f"error: {exc.args[0]}") from exc
    except (ScheduleError, TableFormatError) as exc:
        raise SystemExit(f"error: {exc}") from exc

    print(f"Loaded {len(volume)} volume rows and {len(index)} matchups for week {args.week}")
    byes = index.bye_teams()
    if byes:
        print(f"Teams on bye: {', '.join(byes)}")

    result = asyncio.run(_select(engine, args, volume, index))
    recommendations = result.selected

    args.output.write_text(export_recommendations_to_csv(recommendations), encoding="utf-8")
    print(f"Wrote {len(recommendations)} recommendations to {args.output}")
    if args.json:
        payload = recommendations_payload(recommendations, week=args.week, season=args.season, profile=profile.name)
        args.json.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote JSON payload to {args.json}")

    if result.rejected:
        preview = ", ".join(f"{rec.player_name} ({check.status})" for rec, check in result.rejected[:5])
        more = len(result.rejected) - 5
        suffix = f", +{more} more" if more > 0 else ""
        print(f"Rejected during validation: {preview}{suffix}")

    for rank, rec in enumerate(recommendations[:10], start=1):
        print(f"{rank:>2}. {rec.player_name} ({rec.team}) vs {rec.opponent}: {rec.final_score} {rec.tier}")

    if args.save and recommendations:
        run = PredictionStore().save_week(args.week, args.season, recommendations, profile=profile.name)
        print(f"Stored run {run.run_id}")


if __name__ == "__main__":
    main()
