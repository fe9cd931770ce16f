"""
Base repository protocols.

Defines abstract interfaces for the data the stats engine reads and the
snapshots it writes. Games, teams, rosters and event logs are owned by
other services; the stats engine only reads them through these interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.models import (
    GameEvent,
    GameInfo,
    PlayerInfo,
    PlayerStatsSnapshot,
    RosterEntry,
    TeamInfo,
    TeamMembership,
    TeamStatsSnapshot,
)


class GameRepository(ABC):
    """Read access to games."""

    @abstractmethod
    async def get_game(self, game_id: str) -> GameInfo | None:
        """
        Find a game by ID, including its team name.

        Returns:
            GameInfo, or None if not found
        """
        ...

    @abstractmethod
    async def get_finished_games(self, team_id: str) -> list[GameInfo]:
        """
        Get a team's FINISHED games, newest first.

        Args:
            team_id: Team ID

        Returns:
            Finished games ordered by date descending
        """
        ...

    @abstractmethod
    async def get_finished_games_for_teams(self, team_ids: Sequence[str]) -> list[GameInfo]:
        """
        Get FINISHED games for several teams in a single query.

        Args:
            team_ids: Team IDs

        Returns:
            Finished games of all given teams, newest first
        """
        ...


class TeamRepository(ABC):
    """Read access to teams."""

    @abstractmethod
    async def get_team(self, team_id: str) -> TeamInfo | None:
        ...


class PlayerRepository(ABC):
    """Read access to player (user) records."""

    @abstractmethod
    async def get_player(self, player_id: str) -> PlayerInfo | None:
        ...


class RosterRepository(ABC):
    """Read access to team memberships."""

    @abstractmethod
    async def get_team_roster(self, team_id: str) -> list[RosterEntry]:
        """
        Get every member of a team, with player names.

        Args:
            team_id: Team ID

        Returns:
            Roster entries in a stable order
        """
        ...

    @abstractmethod
    async def get_membership(self, team_id: str, player_id: str) -> RosterEntry | None:
        """Membership of one player on one team, or None."""
        ...

    @abstractmethod
    async def get_player_memberships(self, player_id: str) -> list[TeamMembership]:
        """
        Get every team a player belongs to, with season and league names.

        Args:
            player_id: Player ID

        Returns:
            Memberships in a stable order
        """
        ...


class GameEventRepository(ABC):
    """Read access to game event logs."""

    @abstractmethod
    async def list_events(self, game_id: str) -> list[GameEvent]:
        """
        Get a game's events in timestamp order, with player names joined.

        Args:
            game_id: Game ID

        Returns:
            Events ordered by timestamp ascending
        """
        ...


class SnapshotRepository(ABC):
    """Persisted per-game player and team stat snapshots."""

    @abstractmethod
    async def find_player_snapshots(
        self,
        game_ids: Sequence[str],
        player_ids: Optional[Sequence[str]] = None,
    ) -> list[PlayerStatsSnapshot]:
        """
        Batch-fetch player snapshots for a set of games.

        Args:
            game_ids: Games to fetch snapshots for
            player_ids: Optional filter on players

        Returns:
            Matching snapshots (empty if game_ids is empty)
        """
        ...

    @abstractmethod
    async def find_team_snapshots(
        self,
        team_id: str,
        game_ids: Sequence[str],
    ) -> list[TeamStatsSnapshot]:
        """Team snapshots of one team for a set of games."""
        ...

    @abstractmethod
    async def replace_game_snapshots(
        self,
        game_id: str,
        team_snapshot: TeamStatsSnapshot,
        player_snapshots: Sequence[PlayerStatsSnapshot],
    ) -> None:
        """
        Replace all snapshots of a game atomically.

        Player rows are upserted on (player_id, game_id) and rows of players
        no longer in ``player_snapshots`` are removed; the team row is
        upserted on (team_id, game_id). Either every write lands or none do.

        Args:
            game_id: Game being finalized
            team_snapshot: Team totals
            player_snapshots: One snapshot per player who appeared
        """
        ...


class AccessPolicy(ABC):
    """
    Authorization collaborator.

    The stats engine consumes access decisions as opaque booleans.
    """

    @abstractmethod
    async def can_access_team(self, user_id: str, team_id: str) -> bool:
        ...

    @abstractmethod
    async def is_system_admin(self, user_id: str) -> bool:
        ...


class SystemAccessPolicy(AccessPolicy):
    """Grants access to everything; used by trusted ops tooling."""

    async def can_access_team(self, user_id: str, team_id: str) -> bool:
        return True

    async def is_system_admin(self, user_id: str) -> bool:
        return True


@dataclass
class RepositorySet:
    """Container for all repository implementations."""

    games: GameRepository
    teams: TeamRepository
    players: PlayerRepository
    rosters: RosterRepository
    events: GameEventRepository
    snapshots: SnapshotRepository
    access: AccessPolicy
