"""
Stats services.

- stats: StatsService, the entry point for game, season and career reads
- finalizer: snapshot persistence when a game becomes FINISHED
- batch: constant-query loading for roster and career views
"""

from .finalizer import (
    RefinalizeResult,
    finalize_game_stats,
    finalize_game_stats_safely,
    handle_game_status_change,
    refinalize_team_games,
)
from .stats import StatsService, close_stats_service, get_stats_service, set_stats_service

__all__ = [
    "RefinalizeResult",
    "StatsService",
    "close_stats_service",
    "finalize_game_stats",
    "finalize_game_stats_safely",
    "get_stats_service",
    "handle_game_status_change",
    "refinalize_team_games",
    "set_stats_service",
]
