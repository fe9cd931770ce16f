"""
Repository abstraction layer.

Provides database-agnostic interfaces for the data the stats engine reads
and the snapshots it writes.

Usage:
    from courtside_stats.repositories import get_repositories

    repos = get_repositories(db, access=my_access_policy)
    game = await repos.games.get_game(game_id)
    events = await repos.events.list_events(game_id)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import (
    AccessPolicy,
    GameEventRepository,
    GameRepository,
    PlayerRepository,
    RepositorySet,
    RosterRepository,
    SnapshotRepository,
    SystemAccessPolicy,
    TeamRepository,
)

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB

__all__ = [
    "AccessPolicy",
    "GameEventRepository",
    "GameRepository",
    "PlayerRepository",
    "RepositorySet",
    "RosterRepository",
    "SnapshotRepository",
    "SystemAccessPolicy",
    "TeamRepository",
    "get_repositories",
]


def get_repositories(db: "AsyncPostgresDB", access: AccessPolicy) -> RepositorySet:
    """
    Get repository set for the given database connection.

    Authorization is owned by another service, so the access policy is
    always supplied by the caller.

    Args:
        db: Async database connection
        access: Authorization collaborator

    Returns:
        RepositorySet with PostgreSQL implementations
    """
    from .postgres import (
        PostgresGameEventRepository,
        PostgresGameRepository,
        PostgresPlayerRepository,
        PostgresRosterRepository,
        PostgresSnapshotRepository,
        PostgresTeamRepository,
    )

    return RepositorySet(
        games=PostgresGameRepository(db),
        teams=PostgresTeamRepository(db),
        players=PostgresPlayerRepository(db),
        rosters=PostgresRosterRepository(db),
        events=PostgresGameEventRepository(db),
        snapshots=PostgresSnapshotRepository(db),
        access=access,
    )
