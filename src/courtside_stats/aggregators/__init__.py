"""
Stat aggregators.

Pure functions that turn event logs and persisted snapshots into stat lines:
- events: event metadata parsing and interpretation
- game: per-game player lines and team totals
- season: season and career aggregation over snapshots
"""

from .events import StatLine, apply_event, parse_event_detail
from .game import calculate_player_stats, calculate_team_totals, percentage, round_half_up
from .season import (
    aggregate_career,
    aggregate_player_season,
    aggregate_team_season,
    efficiency,
    empty_player_stats,
    per_game,
)

__all__ = [
    "StatLine",
    "apply_event",
    "parse_event_detail",
    "calculate_player_stats",
    "calculate_team_totals",
    "percentage",
    "round_half_up",
    "aggregate_career",
    "aggregate_player_season",
    "aggregate_team_season",
    "efficiency",
    "empty_player_stats",
    "per_game",
]
