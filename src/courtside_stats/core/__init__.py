"""
Core module for Courtside Stats.

This module provides the foundational components:
- Configuration management (config.py)
- Enums and table names (types.py)
- Data models (models.py)
- Error taxonomy (errors.py)

Usage:
    from courtside_stats.core import Settings, get_settings
    from courtside_stats.core import GameEventType, GameStatus
    from courtside_stats.core import PlayerGameStats, TeamGameStats
    from courtside_stats.core import NotFoundError, ForbiddenError
"""

# Configuration
from .config import Settings, get_settings

# Errors
from .errors import (
    StatsError,
    NotFoundError,
    ForbiddenError,
    UnexpectedError,
    StoreError,
)

# Types
from .types import (
    GameEventType,
    GameStatus,
    GameResult,
    PLAYER_STATS_TABLE,
    TEAM_STATS_TABLE,
)

# Models
from .models import (
    STAT_LINE_FIELDS,
    GameEvent,
    GameInfo,
    TeamInfo,
    PlayerInfo,
    RosterEntry,
    TeamMembership,
    PlayerStatsSnapshot,
    TeamStatsSnapshot,
    PlayerGameStats,
    TeamGameStats,
    AggregatedPlayerStats,
    BoxScore,
    RecentGame,
    TeamSeasonStats,
    PlayerTeamStats,
    PlayerOverallStats,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "StatsError",
    "NotFoundError",
    "ForbiddenError",
    "UnexpectedError",
    "StoreError",
    # Types
    "GameEventType",
    "GameStatus",
    "GameResult",
    "PLAYER_STATS_TABLE",
    "TEAM_STATS_TABLE",
    # Models
    "STAT_LINE_FIELDS",
    "GameEvent",
    "GameInfo",
    "TeamInfo",
    "PlayerInfo",
    "RosterEntry",
    "TeamMembership",
    "PlayerStatsSnapshot",
    "TeamStatsSnapshot",
    "PlayerGameStats",
    "TeamGameStats",
    "AggregatedPlayerStats",
    "BoxScore",
    "RecentGame",
    "TeamSeasonStats",
    "PlayerTeamStats",
    "PlayerOverallStats",
]
