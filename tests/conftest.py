"""
Pytest configuration for courtside-stats tests.

Provides an in-memory implementation of every repository interface that
counts the queries it serves, so service tests can assert both results and
query counts without a database.
"""

import os
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional, Sequence

import pytest

from courtside_stats.core.config import Settings
from courtside_stats.core.errors import StoreError
from courtside_stats.core.models import (
    GameEvent,
    GameInfo,
    PlayerInfo,
    PlayerStatsSnapshot,
    RosterEntry,
    TeamInfo,
    TeamMembership,
    TeamStatsSnapshot,
)
from courtside_stats.core.types import GameEventType, GameStatus
from courtside_stats.repositories.base import (
    AccessPolicy,
    GameEventRepository,
    GameRepository,
    PlayerRepository,
    RepositorySet,
    RosterRepository,
    SnapshotRepository,
    TeamRepository,
)
from courtside_stats.services.stats import StatsService


def pytest_configure(config):
    """Configure pytest with database URL if available."""
    # Try to load from .env file if environment variables not already set
    env_file = os.path.join(os.path.dirname(__file__), "..", ".env")
    if os.path.exists(env_file):
        with open(env_file) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")
                    if key not in os.environ:
                        os.environ[key] = value


BASE_DATE = datetime(2025, 1, 1, 18, 0, 0)


def make_event(
    player_id: Optional[str],
    event_type: GameEventType,
    player_name: Optional[str] = "Player",
    game_id: str = "g1",
    **metadata,
) -> GameEvent:
    """Build a GameEvent; metadata keyword arguments become the metadata dict."""
    return GameEvent(
        game_id=game_id,
        player_id=player_id,
        player_name=player_name if player_id else None,
        event_type=event_type,
        metadata=metadata,
    )


# =============================================================================
# In-memory store
# =============================================================================


class InMemoryStore(
    GameRepository,
    TeamRepository,
    PlayerRepository,
    RosterRepository,
    GameEventRepository,
    SnapshotRepository,
):
    """All repositories backed by dicts; ``queries`` counts calls per method."""

    def __init__(self):
        self.games: dict[str, GameInfo] = {}
        self.teams: dict[str, TeamInfo] = {}
        self.team_seasons: dict[str, tuple[str, str]] = {}
        self.players: dict[str, PlayerInfo] = {}
        self.rosters: dict[str, list[RosterEntry]] = {}
        self.events: dict[str, list[GameEvent]] = {}
        self.player_snapshots: dict[tuple[str, str], PlayerStatsSnapshot] = {}
        self.team_snapshots: dict[tuple[str, str], TeamStatsSnapshot] = {}
        self.queries: Counter = Counter()
        self.fail_writes = False

    # -- builders -------------------------------------------------------------

    def add_team(
        self,
        team_id: str,
        name: str,
        season_name: str = "Spring 2025",
        league_name: str = "City League",
    ) -> TeamInfo:
        team = TeamInfo(id=team_id, name=name)
        self.teams[team_id] = team
        self.team_seasons[team_id] = (season_name, league_name)
        self.rosters.setdefault(team_id, [])
        return team

    def add_player(self, player_id: str, name: str) -> PlayerInfo:
        player = PlayerInfo(id=player_id, name=name)
        self.players[player_id] = player
        return player

    def add_member(
        self,
        team_id: str,
        player_id: str,
        jersey_number: Optional[int] = None,
        position: Optional[str] = None,
    ) -> RosterEntry:
        player = self.players.get(player_id)
        entry = RosterEntry(
            player_id=player_id,
            player_name=player.name if player else None,
            jersey_number=jersey_number,
            position=position,
        )
        self.rosters.setdefault(team_id, []).append(entry)
        return entry

    def add_game(
        self,
        game_id: str,
        team_id: str,
        status: GameStatus = GameStatus.FINISHED,
        home_score: int = 0,
        away_score: int = 0,
        days: int = 0,
        opponent: str = "Opponents",
    ) -> GameInfo:
        game = GameInfo(
            id=game_id,
            team_id=team_id,
            team_name=self.teams[team_id].name,
            status=status,
            home_score=home_score,
            away_score=away_score,
            opponent=opponent,
            date=BASE_DATE + timedelta(days=days),
        )
        self.games[game_id] = game
        self.events.setdefault(game_id, [])
        return game

    def add_event(
        self,
        game_id: str,
        player_id: Optional[str],
        event_type: GameEventType,
        **metadata,
    ) -> GameEvent:
        log = self.events.setdefault(game_id, [])
        player = self.players.get(player_id) if player_id else None
        event = GameEvent(
            id=f"{game_id}-e{len(log) + 1}",
            game_id=game_id,
            player_id=player_id,
            player_name=player.name if player else None,
            event_type=event_type,
            timestamp=BASE_DATE + timedelta(seconds=len(log)),
            metadata=metadata,
        )
        log.append(event)
        return event

    # -- GameRepository --------------------------------------------------------

    async def get_game(self, game_id: str) -> GameInfo | None:
        self.queries["get_game"] += 1
        return self.games.get(game_id)

    def _finished(self, team_ids: Sequence[str]) -> list[GameInfo]:
        games = [
            g for g in self.games.values()
            if g.team_id in team_ids and g.status == GameStatus.FINISHED
        ]
        return sorted(games, key=lambda g: g.date, reverse=True)

    async def get_finished_games(self, team_id: str) -> list[GameInfo]:
        self.queries["get_finished_games"] += 1
        return self._finished([team_id])

    async def get_finished_games_for_teams(self, team_ids: Sequence[str]) -> list[GameInfo]:
        self.queries["get_finished_games_for_teams"] += 1
        return self._finished(list(team_ids))

    # -- TeamRepository / PlayerRepository -------------------------------------

    async def get_team(self, team_id: str) -> TeamInfo | None:
        self.queries["get_team"] += 1
        return self.teams.get(team_id)

    async def get_player(self, player_id: str) -> PlayerInfo | None:
        self.queries["get_player"] += 1
        return self.players.get(player_id)

    # -- RosterRepository ------------------------------------------------------

    async def get_team_roster(self, team_id: str) -> list[RosterEntry]:
        self.queries["get_team_roster"] += 1
        return list(self.rosters.get(team_id, []))

    async def get_membership(self, team_id: str, player_id: str) -> RosterEntry | None:
        self.queries["get_membership"] += 1
        for entry in self.rosters.get(team_id, []):
            if entry.player_id == player_id:
                return entry
        return None

    async def get_player_memberships(self, player_id: str) -> list[TeamMembership]:
        self.queries["get_player_memberships"] += 1
        memberships = []
        for team_id, roster in self.rosters.items():
            for entry in roster:
                if entry.player_id != player_id:
                    continue
                season_name, league_name = self.team_seasons.get(team_id, (None, None))
                memberships.append(
                    TeamMembership(
                        team_id=team_id,
                        team_name=self.teams[team_id].name,
                        season_name=season_name,
                        league_name=league_name,
                        jersey_number=entry.jersey_number,
                        position=entry.position,
                    )
                )
        return memberships

    # -- GameEventRepository ---------------------------------------------------

    async def list_events(self, game_id: str) -> list[GameEvent]:
        self.queries["list_events"] += 1
        return list(self.events.get(game_id, []))

    # -- SnapshotRepository ----------------------------------------------------

    async def find_player_snapshots(
        self,
        game_ids: Sequence[str],
        player_ids: Optional[Sequence[str]] = None,
    ) -> list[PlayerStatsSnapshot]:
        self.queries["find_player_snapshots"] += 1
        return [
            s for s in self.player_snapshots.values()
            if s.game_id in game_ids and (player_ids is None or s.player_id in player_ids)
        ]

    async def find_team_snapshots(
        self,
        team_id: str,
        game_ids: Sequence[str],
    ) -> list[TeamStatsSnapshot]:
        self.queries["find_team_snapshots"] += 1
        return [
            s for s in self.team_snapshots.values()
            if s.team_id == team_id and s.game_id in game_ids
        ]

    async def replace_game_snapshots(
        self,
        game_id: str,
        team_snapshot: TeamStatsSnapshot,
        player_snapshots: Sequence[PlayerStatsSnapshot],
    ) -> None:
        self.queries["replace_game_snapshots"] += 1
        if self.fail_writes:
            raise StoreError("connection reset", operation="transaction")

        keep = {s.player_id for s in player_snapshots}
        for key in [k for k in self.player_snapshots if k[1] == game_id and k[0] not in keep]:
            del self.player_snapshots[key]
        for snapshot in player_snapshots:
            self.player_snapshots[(snapshot.player_id, game_id)] = snapshot
        self.team_snapshots[(team_snapshot.team_id, game_id)] = team_snapshot


class FakeAccessPolicy(AccessPolicy):
    """Access granted per (user, team) pair; admins see everything."""

    def __init__(self):
        self.grants: set[tuple[str, str]] = set()
        self.admins: set[str] = set()
        self.checks: Counter = Counter()

    def grant(self, user_id: str, *team_ids: str) -> None:
        for team_id in team_ids:
            self.grants.add((user_id, team_id))

    async def can_access_team(self, user_id: str, team_id: str) -> bool:
        self.checks[team_id] += 1
        return user_id in self.admins or (user_id, team_id) in self.grants

    async def is_system_admin(self, user_id: str) -> bool:
        return user_id in self.admins


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def access() -> FakeAccessPolicy:
    return FakeAccessPolicy()


@pytest.fixture
def repos(store, access) -> RepositorySet:
    return RepositorySet(
        games=store,
        teams=store,
        players=store,
        rosters=store,
        events=store,
        snapshots=store,
        access=access,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, recent_games_limit=10)


@pytest.fixture
def service(repos, settings) -> StatsService:
    return StatsService(repos, settings=settings)


@pytest.fixture(scope="session")
def database_url():
    """Get the PostgreSQL database URL."""
    url = os.environ.get("DATABASE_URL") or os.environ.get("NEON_DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not set")
    return url
