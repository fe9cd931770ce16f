"""
Core types and constants for Courtside Stats.

This module provides:
- GameEventType, GameStatus and GameResult enums
- Unified table names shared by the store and the migrations
"""

from enum import Enum


class GameEventType(str, Enum):
    """Kinds of events recorded in a game's event log."""

    SHOT = "SHOT"
    REBOUND = "REBOUND"
    ASSIST = "ASSIST"
    STEAL = "STEAL"
    BLOCK = "BLOCK"
    TURNOVER = "TURNOVER"
    FOUL = "FOUL"
    SUBSTITUTION = "SUBSTITUTION"
    TIMEOUT = "TIMEOUT"


class GameStatus(str, Enum):
    """Game lifecycle states (owned by the game-management collaborator)."""

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"


class GameResult(str, Enum):
    """Win/loss label for a finished game."""

    WIN = "W"
    LOSS = "L"


# Events that only carry timeline information
TIMELINE_EVENT_TYPES = frozenset({GameEventType.SUBSTITUTION, GameEventType.TIMEOUT})

# Events that bump exactly one counter on the player's stat line
COUNTING_EVENT_FIELDS: dict[GameEventType, str] = {
    GameEventType.ASSIST: "assists",
    GameEventType.STEAL: "steals",
    GameEventType.BLOCK: "blocks",
    GameEventType.TURNOVER: "turnovers",
    GameEventType.FOUL: "fouls",
}


# =============================================================================
# Table names
# =============================================================================
# Tables owned by external collaborators are read-only from this package.

USERS_TABLE = "users"
TEAMS_TABLE = "teams"
TEAM_MEMBERS_TABLE = "team_members"
SEASONS_TABLE = "seasons"
LEAGUES_TABLE = "leagues"
GAMES_TABLE = "games"
GAME_EVENTS_TABLE = "game_events"

# Snapshot tables written by the finalizer
PLAYER_STATS_TABLE = "player_stats"
TEAM_STATS_TABLE = "team_stats"
META_TABLE = "meta"
