"""
PostgreSQL repository implementations.

Reads the game-management tables (users, teams, team_members, seasons,
leagues, games, game_events) and reads/writes the snapshot tables
(player_stats, team_stats). Batch reads pass id lists as a single array
parameter (``= ANY(%s::text[])``) so each batch is one round trip.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence

from ..core.models import (
    STAT_LINE_FIELDS,
    GameEvent,
    GameInfo,
    PlayerInfo,
    PlayerStatsSnapshot,
    RosterEntry,
    TeamInfo,
    TeamMembership,
    TeamStatsSnapshot,
)
from ..core.types import (
    GAME_EVENTS_TABLE,
    GAMES_TABLE,
    LEAGUES_TABLE,
    PLAYER_STATS_TABLE,
    SEASONS_TABLE,
    TEAM_MEMBERS_TABLE,
    TEAM_STATS_TABLE,
    TEAMS_TABLE,
    USERS_TABLE,
    GameStatus,
)
from .base import (
    GameEventRepository,
    GameRepository,
    PlayerRepository,
    RosterRepository,
    SnapshotRepository,
    TeamRepository,
)

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB

logger = logging.getLogger(__name__)

TEAM_PERCENTAGE_COLUMNS = (
    "field_goal_percentage",
    "three_point_percentage",
    "free_throw_percentage",
)

STAT_COLUMNS_SQL = ", ".join(STAT_LINE_FIELDS)

_GAME_SELECT = f"""
    SELECT g.id, g.team_id, t.name AS team_name, g.status, g.home_score,
           g.away_score, g.opponent, g.date
    FROM {GAMES_TABLE} g
    JOIN {TEAMS_TABLE} t ON t.id = g.team_id
"""


def _upsert_sql(table: str, key_columns: tuple[str, ...], value_columns: tuple[str, ...]) -> str:
    """Build an INSERT ... ON CONFLICT DO UPDATE statement."""
    columns = key_columns + value_columns
    placeholders = ", ".join(["%s"] * len(columns))
    updates = ",\n            ".join(f"{col} = excluded.{col}" for col in value_columns)
    return f"""
        INSERT INTO {table} ({", ".join(columns)})
        VALUES ({placeholders})
        ON CONFLICT ({", ".join(key_columns)}) DO UPDATE SET
            {updates},
            updated_at = NOW()
    """


PLAYER_STATS_UPSERT = _upsert_sql(PLAYER_STATS_TABLE, ("player_id", "game_id"), STAT_LINE_FIELDS)
TEAM_STATS_UPSERT = _upsert_sql(
    TEAM_STATS_TABLE,
    ("team_id", "game_id"),
    STAT_LINE_FIELDS + TEAM_PERCENTAGE_COLUMNS,
)


class PostgresGameRepository(GameRepository):
    """PostgreSQL implementation for game reads."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def get_game(self, game_id: str) -> GameInfo | None:
        row = await self.db.fetchone(f"{_GAME_SELECT} WHERE g.id = %s", (game_id,))
        return GameInfo(**row) if row else None

    async def get_finished_games(self, team_id: str) -> list[GameInfo]:
        rows = await self.db.fetchall(
            f"""
            {_GAME_SELECT}
            WHERE g.team_id = %s AND g.status = %s
            ORDER BY g.date DESC, g.id
            """,
            (team_id, GameStatus.FINISHED.value),
        )
        return [GameInfo(**row) for row in rows]

    async def get_finished_games_for_teams(self, team_ids: Sequence[str]) -> list[GameInfo]:
        if not team_ids:
            return []
        rows = await self.db.fetchall(
            f"""
            {_GAME_SELECT}
            WHERE g.team_id = ANY(%s::text[]) AND g.status = %s
            ORDER BY g.date DESC, g.id
            """,
            (list(team_ids), GameStatus.FINISHED.value),
        )
        return [GameInfo(**row) for row in rows]


class PostgresTeamRepository(TeamRepository):
    """PostgreSQL implementation for team reads."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def get_team(self, team_id: str) -> TeamInfo | None:
        row = await self.db.fetchone(
            f"SELECT id, name FROM {TEAMS_TABLE} WHERE id = %s",
            (team_id,),
        )
        return TeamInfo(**row) if row else None


class PostgresPlayerRepository(PlayerRepository):
    """PostgreSQL implementation for player reads (players are users)."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def get_player(self, player_id: str) -> PlayerInfo | None:
        row = await self.db.fetchone(
            f"SELECT id, name FROM {USERS_TABLE} WHERE id = %s",
            (player_id,),
        )
        return PlayerInfo(**row) if row else None


class PostgresRosterRepository(RosterRepository):
    """PostgreSQL implementation for team membership reads."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def get_team_roster(self, team_id: str) -> list[RosterEntry]:
        rows = await self.db.fetchall(
            f"""
            SELECT m.player_id, u.name AS player_name, m.jersey_number, m.position
            FROM {TEAM_MEMBERS_TABLE} m
            LEFT JOIN {USERS_TABLE} u ON u.id = m.player_id
            WHERE m.team_id = %s
            ORDER BY m.created_at, m.player_id
            """,
            (team_id,),
        )
        return [RosterEntry(**row) for row in rows]

    async def get_membership(self, team_id: str, player_id: str) -> RosterEntry | None:
        row = await self.db.fetchone(
            f"""
            SELECT player_id, jersey_number, position
            FROM {TEAM_MEMBERS_TABLE}
            WHERE team_id = %s AND player_id = %s
            """,
            (team_id, player_id),
        )
        return RosterEntry(**row) if row else None

    async def get_player_memberships(self, player_id: str) -> list[TeamMembership]:
        rows = await self.db.fetchall(
            f"""
            SELECT m.team_id, t.name AS team_name, s.name AS season_name,
                   l.name AS league_name, m.jersey_number, m.position
            FROM {TEAM_MEMBERS_TABLE} m
            JOIN {TEAMS_TABLE} t ON t.id = m.team_id
            LEFT JOIN {SEASONS_TABLE} s ON s.id = t.season_id
            LEFT JOIN {LEAGUES_TABLE} l ON l.id = s.league_id
            WHERE m.player_id = %s
            ORDER BY m.created_at, m.team_id
            """,
            (player_id,),
        )
        return [TeamMembership(**row) for row in rows]


class PostgresGameEventRepository(GameEventRepository):
    """PostgreSQL implementation for event log reads."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def list_events(self, game_id: str) -> list[GameEvent]:
        rows = await self.db.fetchall(
            f"""
            SELECT e.id, e.game_id, e.player_id, u.name AS player_name,
                   e.event_type, e.timestamp, e.metadata
            FROM {GAME_EVENTS_TABLE} e
            LEFT JOIN {USERS_TABLE} u ON u.id = e.player_id
            WHERE e.game_id = %s
            ORDER BY e.timestamp, e.id
            """,
            (game_id,),
        )
        return [GameEvent(**row) for row in rows]


class PostgresSnapshotRepository(SnapshotRepository):
    """PostgreSQL implementation for per-game stat snapshots."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def find_player_snapshots(
        self,
        game_ids: Sequence[str],
        player_ids: Optional[Sequence[str]] = None,
    ) -> list[PlayerStatsSnapshot]:
        if not game_ids:
            return []

        query = f"""
            SELECT player_id, game_id, {STAT_COLUMNS_SQL}
            FROM {PLAYER_STATS_TABLE}
            WHERE game_id = ANY(%s::text[])
        """
        params: list[Any] = [list(game_ids)]
        if player_ids is not None:
            query += " AND player_id = ANY(%s::text[])"
            params.append(list(player_ids))

        rows = await self.db.fetchall(query, params)
        return [PlayerStatsSnapshot(**row) for row in rows]

    async def find_team_snapshots(
        self,
        team_id: str,
        game_ids: Sequence[str],
    ) -> list[TeamStatsSnapshot]:
        if not game_ids:
            return []

        rows = await self.db.fetchall(
            f"""
            SELECT team_id, game_id, {STAT_COLUMNS_SQL}, {", ".join(TEAM_PERCENTAGE_COLUMNS)}
            FROM {TEAM_STATS_TABLE}
            WHERE team_id = %s AND game_id = ANY(%s::text[])
            """,
            (team_id, list(game_ids)),
        )
        return [TeamStatsSnapshot(**row) for row in rows]

    async def replace_game_snapshots(
        self,
        game_id: str,
        team_snapshot: TeamStatsSnapshot,
        player_snapshots: Sequence[PlayerStatsSnapshot],
    ) -> None:
        player_ids = [snapshot.player_id for snapshot in player_snapshots]
        player_rows = [
            (snapshot.player_id, game_id, *(getattr(snapshot, col) for col in STAT_LINE_FIELDS))
            for snapshot in player_snapshots
        ]
        team_row = (
            team_snapshot.team_id,
            game_id,
            *(getattr(team_snapshot, col) for col in STAT_LINE_FIELDS + TEAM_PERCENTAGE_COLUMNS),
        )

        async with self.db.transaction() as conn:
            async with conn.cursor() as cur:
                # Players no longer in the event log lose their row
                await cur.execute(
                    f"""
                    DELETE FROM {PLAYER_STATS_TABLE}
                    WHERE game_id = %s AND NOT (player_id = ANY(%s::text[]))
                    """,
                    (game_id, player_ids),
                )
                deleted = cur.rowcount
                if player_rows:
                    await cur.executemany(PLAYER_STATS_UPSERT, player_rows)
                await cur.execute(TEAM_STATS_UPSERT, team_row)

        logger.debug(
            "Replaced snapshots for game %s: %d players, %d stale rows removed",
            game_id,
            len(player_rows),
            deleted,
        )
