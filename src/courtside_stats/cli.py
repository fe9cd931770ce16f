#!/usr/bin/env python3
"""
Command-line interface for stats operations.

Usage:
    courtside-stats migrate                      # Create/upgrade snapshot tables
    courtside-stats finalize GAME_ID [GAME_ID ...]
    courtside-stats refinalize-team TEAM_ID      # Rebuild snapshots of all finished games
    courtside-stats box-score GAME_ID            # Live box score as JSON
    courtside-stats season TEAM_ID               # Team season + roster stats as JSON

Runs with full access; intended for operators, not end users.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from dotenv import load_dotenv

from .core.config import get_settings
from .core.errors import StatsError
from .repositories import RepositorySet, SystemAccessPolicy, get_repositories

logger = logging.getLogger("courtside_stats.cli")

# Acting user for reads issued from the CLI
SYSTEM_USER_ID = "system"


@asynccontextmanager
async def open_repositories() -> AsyncIterator[RepositorySet]:
    """Open a database pool and yield a full-access repository set."""
    from .pg_async import AsyncPostgresDB

    db = AsyncPostgresDB()
    await db.initialize()
    try:
        yield get_repositories(db, access=SystemAccessPolicy())
    finally:
        await db.close()


def print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


async def cmd_migrate_async(args: argparse.Namespace) -> int:
    from .pg_async import AsyncPostgresDB
    from .schema import get_schema_version, run_migrations

    db = AsyncPostgresDB()
    await db.initialize()
    try:
        applied = await run_migrations(db, force=args.force)
        version = await get_schema_version(db)
    finally:
        await db.close()

    print(f"Applied {applied} migration(s); schema at {version}")
    return 0


def cmd_migrate(args: argparse.Namespace) -> int:
    """Apply pending SQL migrations."""
    return asyncio.run(cmd_migrate_async(args))


async def cmd_finalize_async(args: argparse.Namespace) -> int:
    from .services.finalizer import finalize_game_stats_safely

    failed = []
    async with open_repositories() as repos:
        for game_id in args.game_ids:
            if not await finalize_game_stats_safely(repos, game_id):
                failed.append(game_id)

    print(f"Finalized {len(args.game_ids) - len(failed)} of {len(args.game_ids)} game(s)")
    if failed:
        print(f"Failed: {', '.join(failed)}")
        return 1
    return 0


def cmd_finalize(args: argparse.Namespace) -> int:
    """Finalize one or more games."""
    return asyncio.run(cmd_finalize_async(args))


async def cmd_refinalize_team_async(args: argparse.Namespace) -> int:
    from .services.finalizer import refinalize_team_games

    async with open_repositories() as repos:
        result = await refinalize_team_games(repos, args.team_id)

    print_json(
        {
            "teamId": result.team_id,
            "finalized": result.finalized,
            "failed": result.failed,
        }
    )
    return 1 if result.failed else 0


def cmd_refinalize_team(args: argparse.Namespace) -> int:
    """Re-finalize every finished game of a team."""
    return asyncio.run(cmd_refinalize_team_async(args))


async def cmd_box_score_async(args: argparse.Namespace) -> int:
    from .services.stats import StatsService

    async with open_repositories() as repos:
        box_score = await StatsService(repos).get_box_score(args.game_id, SYSTEM_USER_ID)

    print_json(box_score.model_dump(mode="json", by_alias=True))
    return 0


def cmd_box_score(args: argparse.Namespace) -> int:
    """Print a game's live box score."""
    return asyncio.run(cmd_box_score_async(args))


async def cmd_season_async(args: argparse.Namespace) -> int:
    from .services.stats import StatsService

    async with open_repositories() as repos:
        service = StatsService(repos)
        team_stats, roster_stats = await asyncio.gather(
            service.get_team_season_stats(args.team_id, SYSTEM_USER_ID),
            service.get_team_roster_stats(args.team_id, SYSTEM_USER_ID),
        )

    print_json(
        {
            "team": team_stats.model_dump(mode="json", by_alias=True),
            "players": [p.model_dump(mode="json", by_alias=True) for p in roster_stats],
        }
    )
    return 0


def cmd_season(args: argparse.Namespace) -> int:
    """Print a team's season and roster stats."""
    return asyncio.run(cmd_season_async(args))


def main() -> int:
    """Main entry point."""
    load_dotenv()
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    parser = argparse.ArgumentParser(
        description="Courtside Stats CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # migrate command
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending SQL migrations")
    migrate_parser.add_argument(
        "--force",
        action="store_true",
        help="Re-run migrations even if already applied",
    )

    # finalize command
    finalize_parser = subparsers.add_parser("finalize", help="Persist snapshots for games")
    finalize_parser.add_argument("game_ids", nargs="+", metavar="GAME_ID")

    # refinalize-team command
    refinalize_parser = subparsers.add_parser(
        "refinalize-team",
        help="Rebuild snapshots for every finished game of a team",
    )
    refinalize_parser.add_argument("team_id", metavar="TEAM_ID")

    # box-score command
    box_parser = subparsers.add_parser("box-score", help="Print a live box score")
    box_parser.add_argument("game_id", metavar="GAME_ID")

    # season command
    season_parser = subparsers.add_parser("season", help="Print team season and roster stats")
    season_parser.add_argument("team_id", metavar="TEAM_ID")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "migrate": cmd_migrate,
        "finalize": cmd_finalize,
        "refinalize-team": cmd_refinalize_team,
        "box-score": cmd_box_score,
        "season": cmd_season,
    }

    cmd_func = commands.get(args.command)
    if cmd_func is None:
        parser.print_help()
        return 1

    try:
        return cmd_func(args)
    except StatsError as e:
        logger.error("%s: %s", e.code, e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
