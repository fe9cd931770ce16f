"""
Batch loading for roster and career views.

Fetches every finished game, roster and player snapshot a view needs in a
fixed number of queries (one per kind, regardless of roster or team count),
then groups the snapshots into lookup maps for the pure aggregators.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..core.models import GameInfo, PlayerStatsSnapshot, RosterEntry
from ..repositories.base import RepositorySet

logger = logging.getLogger(__name__)


@dataclass
class SnapshotIndex:
    """Player snapshots grouped by player, plus the game -> team mapping."""

    by_player: dict[str, list[PlayerStatsSnapshot]] = field(default_factory=dict)
    team_by_game: dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        snapshots: Iterable[PlayerStatsSnapshot],
        games: Iterable[GameInfo],
    ) -> "SnapshotIndex":
        """
        Group snapshots by player and map each game of ``games`` to its team.

        Snapshots of games not in ``games`` are kept under their player but
        belong to no team.
        """
        by_player: dict[str, list[PlayerStatsSnapshot]] = defaultdict(list)
        for snapshot in snapshots:
            by_player[snapshot.player_id].append(snapshot)

        return cls(
            by_player=dict(by_player),
            team_by_game={game.id: game.team_id for game in games},
        )

    def for_player(self, player_id: str) -> list[PlayerStatsSnapshot]:
        return self.by_player.get(player_id, [])

    def for_player_on_team(self, player_id: str, team_id: str) -> list[PlayerStatsSnapshot]:
        return [
            s for s in self.for_player(player_id)
            if self.team_by_game.get(s.game_id) == team_id
        ]


@dataclass
class TeamSnapshotBatch:
    """Everything the roster view needs for one team."""

    games: list[GameInfo]
    roster: list[RosterEntry]
    index: SnapshotIndex


@dataclass
class CareerSnapshotBatch:
    """Everything the career view needs for one player across teams."""

    games: list[GameInfo]
    index: SnapshotIndex


async def load_team_snapshot_batch(repos: RepositorySet, team_id: str) -> TeamSnapshotBatch:
    """
    Load a team's finished games, roster and player snapshots.

    Issues three queries: games and roster concurrently, then the snapshots
    of all roster players for those games.

    Args:
        repos: Repository set
        team_id: Team ID

    Returns:
        TeamSnapshotBatch
    """
    games, roster = await asyncio.gather(
        repos.games.get_finished_games(team_id),
        repos.rosters.get_team_roster(team_id),
    )

    snapshots: list[PlayerStatsSnapshot] = []
    if games and roster:
        snapshots = await repos.snapshots.find_player_snapshots(
            [game.id for game in games],
            [entry.player_id for entry in roster],
        )

    logger.debug(
        "Loaded team batch %s: %d games, %d members, %d snapshots",
        team_id,
        len(games),
        len(roster),
        len(snapshots),
    )
    return TeamSnapshotBatch(games=games, roster=roster, index=SnapshotIndex.build(snapshots, games))


async def load_career_snapshot_batch(
    repos: RepositorySet,
    player_id: str,
    team_ids: Sequence[str],
) -> CareerSnapshotBatch:
    """
    Load finished games of several teams and one player's snapshots for them.

    Issues two queries regardless of how many teams are given.

    Args:
        repos: Repository set
        player_id: Player ID
        team_ids: Teams visible to the caller

    Returns:
        CareerSnapshotBatch
    """
    games = await repos.games.get_finished_games_for_teams(team_ids)

    snapshots: list[PlayerStatsSnapshot] = []
    if games:
        snapshots = await repos.snapshots.find_player_snapshots(
            [game.id for game in games],
            [player_id],
        )

    return CareerSnapshotBatch(games=games, index=SnapshotIndex.build(snapshots, games))
