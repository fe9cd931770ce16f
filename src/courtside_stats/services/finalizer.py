"""
Snapshot finalizer.

When a game becomes FINISHED its stats are recomputed from the live event
log and persisted as per-game player and team snapshots. Season and career
views read only these snapshots.

Finalization is idempotent: running it again for the same game rewrites the
same rows. Concurrent finalizations of one game are last-writer-wins, each
one replacing the whole set of rows in a single transaction.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ..aggregators.game import calculate_player_stats, calculate_team_totals
from ..core.errors import NotFoundError
from ..core.models import (
    GameInfo,
    PlayerGameStats,
    PlayerStatsSnapshot,
    TeamGameStats,
    TeamStatsSnapshot,
)
from ..core.types import GameStatus
from ..repositories.base import RepositorySet

logger = logging.getLogger(__name__)


async def load_game(repos: RepositorySet, game_id: str) -> GameInfo:
    """Fetch a game or raise NotFoundError."""
    game = await repos.games.get_game(game_id)
    if game is None:
        raise NotFoundError("Game not found")
    return game


async def compute_live_stats(
    repos: RepositorySet,
    game: GameInfo,
) -> tuple[list[PlayerGameStats], TeamGameStats]:
    """
    Recompute a game's player lines and team totals from its event log.

    The event log and the roster are fetched concurrently.

    Returns:
        (player_stats sorted by points descending, team totals)
    """
    events, roster = await asyncio.gather(
        repos.events.list_events(game.id),
        repos.rosters.get_team_roster(game.team_id),
    )
    player_stats = calculate_player_stats(events, {entry.player_id: entry for entry in roster})
    team_stats = calculate_team_totals(game.team_id, game.team_name or "", player_stats)
    return player_stats, team_stats


def to_player_snapshot(game_id: str, stats: PlayerGameStats) -> PlayerStatsSnapshot:
    return PlayerStatsSnapshot(player_id=stats.player_id, game_id=game_id, **stats.totals())


def to_team_snapshot(game_id: str, stats: TeamGameStats) -> TeamStatsSnapshot:
    return TeamStatsSnapshot(
        team_id=stats.team_id,
        game_id=game_id,
        field_goal_percentage=stats.field_goal_percentage,
        three_point_percentage=stats.three_point_percentage,
        free_throw_percentage=stats.free_throw_percentage,
        **stats.totals(),
    )


async def finalize_game_stats(repos: RepositorySet, game_id: str) -> TeamStatsSnapshot:
    """
    Persist a game's player and team snapshots.

    Recomputes stats from the live event log and replaces every snapshot
    row of the game in one transaction.

    Args:
        repos: Repository set
        game_id: Game ID

    Returns:
        The persisted team snapshot

    Raises:
        NotFoundError: If the game does not exist
        StoreError: If the store fails; no partial writes remain
    """
    game = await load_game(repos, game_id)
    player_stats, team_stats = await compute_live_stats(repos, game)

    team_snapshot = to_team_snapshot(game_id, team_stats)
    await repos.snapshots.replace_game_snapshots(
        game_id,
        team_snapshot,
        [to_player_snapshot(game_id, stats) for stats in player_stats],
    )

    logger.info(
        "Finalized stats for game %s (team %s): %d players, %d points",
        game_id,
        game.team_id,
        len(player_stats),
        team_snapshot.points,
    )
    return team_snapshot


async def finalize_game_stats_safely(repos: RepositorySet, game_id: str) -> bool:
    """
    Finalize a game, logging instead of raising on failure.

    A failed finalization must not fail the status update that triggered
    it; the game can be re-finalized later with refinalize_team_games.

    Returns:
        True if snapshots were written
    """
    try:
        await finalize_game_stats(repos, game_id)
    except Exception:
        logger.exception("Failed to finalize stats for game %s", game_id)
        return False
    return True


async def handle_game_status_change(
    repos: RepositorySet,
    game_id: str,
    status: GameStatus,
) -> bool:
    """
    Status-transition hook for the game-management service.

    Called after a game's new status has been committed. Only a transition
    to FINISHED triggers finalization.

    Returns:
        True if snapshots were written for this transition
    """
    if status != GameStatus.FINISHED:
        return False
    return await finalize_game_stats_safely(repos, game_id)


@dataclass
class RefinalizeResult:
    team_id: str
    finalized: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


async def refinalize_team_games(repos: RepositorySet, team_id: str) -> RefinalizeResult:
    """
    Re-run finalization for every finished game of a team.

    Used to backfill snapshots after a failed finalization or an event-log
    correction. Games are processed one at a time; a failing game is logged
    and does not stop the rest.

    Args:
        repos: Repository set
        team_id: Team ID

    Returns:
        RefinalizeResult listing finalized and failed game IDs
    """
    result = RefinalizeResult(team_id=team_id)
    games = await repos.games.get_finished_games(team_id)

    for game in games:
        if await finalize_game_stats_safely(repos, game.id):
            result.finalized.append(game.id)
        else:
            result.failed.append(game.id)

    logger.info(
        "Re-finalized team %s: %d games finalized, %d failed",
        team_id,
        len(result.finalized),
        len(result.failed),
    )
    return result
