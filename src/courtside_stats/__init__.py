"""
Courtside Stats

Basketball game statistics engine. Turns a game's event log into box
scores, persists per-game snapshots when a game finishes, and aggregates
those snapshots into season and career stats.

Key Features:
- Live per-game player and team stats computed from raw events
- Idempotent, transactional snapshot finalization
- Season, roster and career views with constant-query batch loading

Usage:
    from courtside_stats import StatsService, get_repositories
    from courtside_stats.pg_async import get_async_db

    db = await get_async_db()
    service = StatsService(get_repositories(db, access=my_access_policy))

    box_score = await service.get_box_score(game_id, user_id)
    season = await service.get_team_season_stats(team_id, user_id)
"""

from .core import (
    ForbiddenError,
    NotFoundError,
    Settings,
    StatsError,
    StoreError,
    UnexpectedError,
    get_settings,
)
from .repositories import AccessPolicy, RepositorySet, SystemAccessPolicy, get_repositories
from .services import (
    StatsService,
    finalize_game_stats,
    finalize_game_stats_safely,
    handle_game_status_change,
    refinalize_team_games,
)

__version__ = "1.0.0"

__all__ = [
    "AccessPolicy",
    "ForbiddenError",
    "NotFoundError",
    "RepositorySet",
    "Settings",
    "StatsError",
    "StatsService",
    "StoreError",
    "SystemAccessPolicy",
    "UnexpectedError",
    "finalize_game_stats",
    "finalize_game_stats_safely",
    "get_repositories",
    "get_settings",
    "handle_game_status_change",
    "refinalize_team_games",
]
