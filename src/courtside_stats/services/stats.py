"""
Stats service.

Entry point for every stats read plus finalization. Inputs are fetched
through the repository set (independent reads issued concurrently) and
handed to the pure aggregators; nothing here mutates shared state.

Access rules:
- Game views require access to the game's team, checked after the game is
  found ("Game not found" wins over "no access").
- Team and season views check access before anything else.
- The career view needs access to at least one of the player's teams and
  only includes the teams the caller can see.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from ..aggregators.game import calculate_team_totals
from ..aggregators.season import (
    aggregate_career,
    aggregate_player_season,
    aggregate_team_season,
    empty_player_stats,
)
from ..core.config import Settings, get_settings
from ..core.errors import ForbiddenError, NotFoundError
from ..core.models import (
    AggregatedPlayerStats,
    BoxScore,
    BoxScoreGame,
    BoxScoreTeam,
    GameInfo,
    PlayerGameStats,
    PlayerInfo,
    PlayerOverallStats,
    PlayerTeamStats,
    TeamGameStats,
    TeamMembership,
    TeamSeasonStats,
    TeamStatsSnapshot,
)
from ..repositories.base import RepositorySet
from . import finalizer
from .batch import load_career_snapshot_batch, load_team_snapshot_batch

logger = logging.getLogger(__name__)


class StatsService:
    """
    Game, season and career statistics.

    Args:
        repos: Repository set (stores plus the access policy)
        settings: Optional settings; defaults to get_settings()
    """

    def __init__(self, repos: RepositorySet, settings: Optional[Settings] = None):
        self.repos = repos
        self.settings = settings or get_settings()

    # =========================================================================
    # Access helpers
    # =========================================================================

    async def _require_team_access(self, user_id: str, team_id: str, message: str) -> None:
        if not await self.repos.access.can_access_team(user_id, team_id):
            raise ForbiddenError(message)

    async def _load_accessible_game(self, game_id: str, user_id: str) -> GameInfo:
        game = await finalizer.load_game(self.repos, game_id)
        await self._require_team_access(
            user_id, game.team_id, "You do not have access to this game"
        )
        return game

    async def _visible_memberships(
        self,
        user_id: str,
        memberships: Sequence[TeamMembership],
    ) -> list[TeamMembership]:
        """Memberships on teams the user can access, in their original order."""
        if await self.repos.access.is_system_admin(user_id):
            return list(memberships)

        allowed = await asyncio.gather(
            *(self.repos.access.can_access_team(user_id, m.team_id) for m in memberships)
        )
        return [m for m, ok in zip(memberships, allowed) if ok]

    # =========================================================================
    # Per-game stats (live, from the event log)
    # =========================================================================

    async def calculate_player_stats(self, game_id: str) -> list[PlayerGameStats]:
        """
        Per-player box-score lines for a game, computed from its events.

        Raises:
            NotFoundError: If the game does not exist
        """
        game = await finalizer.load_game(self.repos, game_id)
        player_stats, _ = await finalizer.compute_live_stats(self.repos, game)
        return player_stats

    @staticmethod
    def calculate_team_totals(
        team_id: str,
        team_name: str,
        player_stats: Sequence[PlayerGameStats],
    ) -> TeamGameStats:
        """Team totals summed from player lines."""
        return calculate_team_totals(team_id, team_name, player_stats)

    async def finalize_game_stats(self, game_id: str) -> TeamStatsSnapshot:
        """Persist the game's snapshots. See finalizer.finalize_game_stats."""
        return await finalizer.finalize_game_stats(self.repos, game_id)

    async def get_box_score(self, game_id: str, user_id: str) -> BoxScore:
        """
        Live box score: game header, team totals and every player line.

        Raises:
            NotFoundError: If the game does not exist
            ForbiddenError: If the user cannot access the game's team
        """
        game = await self._load_accessible_game(game_id, user_id)
        player_stats, team_stats = await finalizer.compute_live_stats(self.repos, game)

        return BoxScore(
            game=BoxScoreGame(
                id=game.id,
                date=game.date,
                status=game.status,
                home_score=game.home_score,
                away_score=game.away_score,
                opponent=game.opponent,
            ),
            team=BoxScoreTeam(
                id=game.team_id,
                name=team_stats.team_name,
                stats=team_stats,
                players=player_stats,
            ),
        )

    async def get_player_game_stats(
        self,
        game_id: str,
        player_id: str,
        user_id: str,
    ) -> PlayerGameStats:
        """
        One player's live line for a game.

        Raises:
            NotFoundError: If the game does not exist or the player has no
                events in it
            ForbiddenError: If the user cannot access the game's team
        """
        game = await self._load_accessible_game(game_id, user_id)
        player_stats, _ = await finalizer.compute_live_stats(self.repos, game)

        for stats in player_stats:
            if stats.player_id == player_id:
                return stats
        raise NotFoundError("Player stats not found for this game")

    # =========================================================================
    # Season stats (from persisted snapshots)
    # =========================================================================

    async def get_player_season_stats(
        self,
        player_id: str,
        team_id: str,
        user_id: str,
    ) -> AggregatedPlayerStats:
        """
        A player's season totals and averages on one team.

        Raises:
            ForbiddenError: If the user cannot access the team
            NotFoundError: If the player does not exist
        """
        await self._require_team_access(user_id, team_id, "You do not have access to this team")

        games, player, membership = await asyncio.gather(
            self.repos.games.get_finished_games(team_id),
            self.repos.players.get_player(player_id),
            self.repos.rosters.get_membership(team_id, player_id),
        )
        if player is None:
            raise NotFoundError("Player not found")

        snapshots = await self.repos.snapshots.find_player_snapshots(
            [game.id for game in games],
            [player_id],
        )
        return aggregate_player_season(player, snapshots, membership)

    async def get_team_season_stats(self, team_id: str, user_id: str) -> TeamSeasonStats:
        """
        A team's record, per-game averages and most recent results.

        Raises:
            ForbiddenError: If the user cannot access the team
            NotFoundError: If the team does not exist
        """
        await self._require_team_access(user_id, team_id, "You do not have access to this team")

        team, games = await asyncio.gather(
            self.repos.teams.get_team(team_id),
            self.repos.games.get_finished_games(team_id),
        )
        if team is None:
            raise NotFoundError("Team not found")

        snapshots = await self.repos.snapshots.find_team_snapshots(
            team_id, [game.id for game in games]
        )
        return aggregate_team_season(
            team, games, snapshots, recent_limit=self.settings.recent_games_limit
        )

    async def get_team_roster_stats(
        self,
        team_id: str,
        user_id: str,
    ) -> list[AggregatedPlayerStats]:
        """
        Season stats for every roster member, best scorers first.

        Members without a finished-game appearance get an all-zero line.
        All inputs come from one batch load.

        Raises:
            ForbiddenError: If the user cannot access the team
        """
        await self._require_team_access(user_id, team_id, "You do not have access to this team")

        batch = await load_team_snapshot_batch(self.repos, team_id)

        roster_stats = []
        for entry in batch.roster:
            snapshots = batch.index.for_player_on_team(entry.player_id, team_id)
            if not snapshots:
                roster_stats.append(empty_player_stats(entry))
                continue
            # Members whose user row is gone keep their games under an empty name
            player = PlayerInfo(id=entry.player_id, name=entry.player_name or "")
            roster_stats.append(aggregate_player_season(player, snapshots, entry))

        roster_stats.sort(key=lambda stats: -stats.points_per_game)
        return roster_stats

    # =========================================================================
    # Career stats
    # =========================================================================

    async def get_player_overall_stats(self, player_id: str, user_id: str) -> PlayerOverallStats:
        """
        A player's season stats on each visible team plus career totals.

        Raises:
            NotFoundError: If the player has no memberships or does not exist
            ForbiddenError: If none of the player's teams is visible
        """
        memberships = await self.repos.rosters.get_player_memberships(player_id)
        if not memberships:
            raise NotFoundError("Player not found or has no team memberships")

        visible = await self._visible_memberships(user_id, memberships)
        if not visible:
            raise ForbiddenError("You do not have access to this player's teams")

        player = await self.repos.players.get_player(player_id)
        if player is None:
            raise NotFoundError("Player not found")

        batch = await load_career_snapshot_batch(
            self.repos, player_id, [m.team_id for m in visible]
        )

        teams = []
        for membership in visible:
            snapshots = batch.index.for_player_on_team(player_id, membership.team_id)
            teams.append(
                PlayerTeamStats(
                    team_id=membership.team_id,
                    team_name=membership.team_name,
                    season_name=membership.season_label,
                    stats=aggregate_player_season(player, snapshots, membership),
                )
            )

        return PlayerOverallStats(
            player=player,
            teams=teams,
            career_totals=aggregate_career(player, [t.stats for t in teams]),
        )


# =============================================================================
# Global service instance
# =============================================================================

_stats_service: Optional[StatsService] = None


def get_stats_service(repos: RepositorySet) -> StatsService:
    """
    Get or create the global stats service instance.

    Args:
        repos: Repository set used when the instance is first created

    Returns:
        StatsService
    """
    global _stats_service
    if _stats_service is None:
        _stats_service = StatsService(repos)
    return _stats_service


def set_stats_service(service: StatsService) -> None:
    """Set the global stats service instance."""
    global _stats_service
    _stats_service = service


def close_stats_service() -> None:
    """Drop the global stats service."""
    global _stats_service
    _stats_service = None
