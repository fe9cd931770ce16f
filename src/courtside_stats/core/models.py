"""
Pydantic models for game, roster and statistics records.

These models are used for:
- Type-safe rows returned by the repositories
- Persisted per-game snapshots written by the finalizer
- Response payloads returned by StatsService

Field names are snake_case in Python; ``model_dump(by_alias=True)`` emits the
camelCase keys the mobile clients consume.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .types import GameEventType, GameResult, GameStatus


class StatsModel(BaseModel):
    """Base model: camelCase aliases, populated by Python field name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Store Records (read-only inputs)
# =============================================================================


class GameEvent(StatsModel):
    """One immutable entry of a game's event log."""

    id: Optional[str] = None
    game_id: str
    player_id: Optional[str] = None
    player_name: Optional[str] = None  # None when the player row is missing
    event_type: GameEventType
    timestamp: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _coerce_metadata(cls, value: Any) -> dict[str, Any]:
        # JSONB may hold a scalar or null; treat anything else as no metadata
        return value if isinstance(value, dict) else {}


class GameInfo(StatsModel):
    """Game row as exposed by the game-management collaborator."""

    id: str
    team_id: str
    team_name: Optional[str] = None
    status: GameStatus
    home_score: int = 0
    away_score: int = 0
    opponent: str
    date: datetime

    @property
    def result(self) -> GameResult:
        """Win/loss from the final score.

        The score columns are not tied to the team's home/away identity, so
        a win is simply ``home_score > away_score``.
        """
        return GameResult.WIN if self.home_score > self.away_score else GameResult.LOSS


class TeamInfo(StatsModel):
    id: str
    name: str


class PlayerInfo(StatsModel):
    id: str
    name: str


class RosterEntry(StatsModel):
    """A team member with optional jersey number and position."""

    player_id: str
    player_name: Optional[str] = None
    jersey_number: Optional[int] = None
    position: Optional[str] = None


class TeamMembership(StatsModel):
    """One team a player belongs (or belonged) to, with season context."""

    team_id: str
    team_name: str
    season_name: Optional[str] = None
    league_name: Optional[str] = None
    jersey_number: Optional[int] = None
    position: Optional[str] = None

    @property
    def season_label(self) -> str:
        """Human-readable ``"<league> - <season>"`` label."""
        parts = [p for p in (self.league_name, self.season_name) if p]
        return " - ".join(parts)


# =============================================================================
# Stat Lines
# =============================================================================

# Summable fields shared by every per-game and aggregated stat line
STAT_LINE_FIELDS: tuple[str, ...] = (
    "points",
    "rebounds",
    "offensive_rebounds",
    "defensive_rebounds",
    "assists",
    "steals",
    "blocks",
    "turnovers",
    "fouls",
    "field_goals_made",
    "field_goals_attempted",
    "three_pointers_made",
    "three_pointers_attempted",
    "free_throws_made",
    "free_throws_attempted",
)


class StatLineModel(StatsModel):
    """Counting stats and shooting splits."""

    points: int = 0
    rebounds: int = 0
    offensive_rebounds: int = 0
    defensive_rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    fouls: int = 0
    field_goals_made: int = 0
    field_goals_attempted: int = 0
    three_pointers_made: int = 0
    three_pointers_attempted: int = 0
    free_throws_made: int = 0
    free_throws_attempted: int = 0

    def totals(self) -> dict[str, int]:
        """Summable fields as a plain dict."""
        return {name: getattr(self, name) for name in STAT_LINE_FIELDS}


class PlayerStatsSnapshot(StatLineModel):
    """Persisted stat line for one player in one finished game."""

    player_id: str
    game_id: str


class TeamStatsSnapshot(StatLineModel):
    """Persisted team totals for one finished game."""

    team_id: str
    game_id: str
    field_goal_percentage: float = 0
    three_point_percentage: float = 0
    free_throw_percentage: float = 0


class PlayerGameStats(StatLineModel):
    """One player's box-score line for a game."""

    player_id: str
    player_name: str
    jersey_number: Optional[int] = None
    position: Optional[str] = None
    field_goal_percentage: float = 0
    three_point_percentage: float = 0
    free_throw_percentage: float = 0


class TeamGameStats(StatLineModel):
    """Team totals for a game, summed from the player lines."""

    team_id: str
    team_name: str
    field_goal_percentage: float = 0
    three_point_percentage: float = 0
    free_throw_percentage: float = 0


class AggregatedPlayerStats(PlayerGameStats):
    """Season or career totals with per-game averages."""

    games_played: int = 0
    points_per_game: float = 0
    rebounds_per_game: float = 0
    assists_per_game: float = 0
    steals_per_game: float = 0
    blocks_per_game: float = 0
    turnovers_per_game: float = 0
    efficiency: float = 0


# =============================================================================
# Response Payloads
# =============================================================================


class BoxScoreGame(StatsModel):
    id: str
    date: datetime
    status: GameStatus
    home_score: int
    away_score: int
    opponent: str


class BoxScoreTeam(StatsModel):
    id: str
    name: str
    stats: TeamGameStats
    players: list[PlayerGameStats]


class BoxScore(StatsModel):
    """Combined team and per-player summary for one game."""

    game: BoxScoreGame
    team: BoxScoreTeam


class RecentGame(StatsModel):
    id: str
    date: datetime
    opponent: str
    home_score: int
    away_score: int
    result: GameResult


class TeamSeasonStats(StatsModel):
    """Team season summary built from persisted team snapshots."""

    team_id: str
    team_name: str
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    points_per_game: float = 0
    rebounds_per_game: float = 0
    assists_per_game: float = 0
    turnovers_per_game: float = 0
    field_goal_percentage: float = 0
    three_point_percentage: float = 0
    free_throw_percentage: float = 0
    recent_games: list[RecentGame] = Field(default_factory=list)


class PlayerTeamStats(StatsModel):
    """Season stats of a player on one team, for the career view."""

    team_id: str
    team_name: str
    season_name: str
    stats: AggregatedPlayerStats


class PlayerOverallStats(StatsModel):
    """Per-team season stats plus career totals over the visible teams."""

    player: PlayerInfo
    teams: list[PlayerTeamStats]
    career_totals: AggregatedPlayerStats
