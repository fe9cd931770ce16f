"""
Season and career aggregation.

Builds aggregated lines from persisted per-game snapshots only, never from
raw events. Everything here is pure; the service layer fetches the inputs.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.models import (
    AggregatedPlayerStats,
    GameInfo,
    PlayerInfo,
    PlayerStatsSnapshot,
    RecentGame,
    RosterEntry,
    STAT_LINE_FIELDS,
    TeamInfo,
    TeamMembership,
    TeamSeasonStats,
    TeamStatsSnapshot,
)
from ..core.types import GameResult
from .game import round_half_up, sum_stat_lines, with_percentages

# Per-game averages exposed on aggregated player lines: output field -> total
PLAYER_AVERAGE_FIELDS = {
    "points_per_game": "points",
    "rebounds_per_game": "rebounds",
    "assists_per_game": "assists",
    "steals_per_game": "steals",
    "blocks_per_game": "blocks",
    "turnovers_per_game": "turnovers",
}

TEAM_AVERAGE_FIELDS = {
    "points_per_game": "points",
    "rebounds_per_game": "rebounds",
    "assists_per_game": "assists",
    "turnovers_per_game": "turnovers",
}

TEAM_PERCENTAGE_FIELDS = (
    "field_goal_percentage",
    "three_point_percentage",
    "free_throw_percentage",
)


def per_game(total: float, games: int) -> float:
    """Per-game average with one decimal; 0 when no games were played."""
    if games <= 0:
        return 0.0
    return round_half_up(total / games * 10) / 10


def efficiency(totals: dict[str, int], games: int) -> float:
    """
    Efficiency rating per game.

    EFF = (PTS + REB + AST + STL + BLK - missed FG - missed FT - TO) / games
    """
    if games <= 0:
        return 0.0
    missed_fg = totals["field_goals_attempted"] - totals["field_goals_made"]
    missed_ft = totals["free_throws_attempted"] - totals["free_throws_made"]
    value = (
        totals["points"]
        + totals["rebounds"]
        + totals["assists"]
        + totals["steals"]
        + totals["blocks"]
        - missed_fg
        - missed_ft
        - totals["turnovers"]
    )
    return per_game(value, games)


def build_aggregated_stats(
    player_id: str,
    player_name: str,
    totals: dict[str, int],
    games_played: int,
    jersey_number: Optional[int] = None,
    position: Optional[str] = None,
) -> AggregatedPlayerStats:
    """Totals plus re-derived percentages, averages and efficiency."""
    averages = {
        field: per_game(totals[source], games_played)
        for field, source in PLAYER_AVERAGE_FIELDS.items()
    }
    return AggregatedPlayerStats(
        player_id=player_id,
        player_name=player_name,
        jersey_number=jersey_number,
        position=position,
        games_played=games_played,
        efficiency=efficiency(totals, games_played),
        **with_percentages(totals),
        **averages,
    )


def aggregate_player_season(
    player: PlayerInfo,
    snapshots: Sequence[PlayerStatsSnapshot],
    membership: Optional[RosterEntry | TeamMembership] = None,
) -> AggregatedPlayerStats:
    """
    Aggregate one player's snapshots on one team into season stats.

    Args:
        player: The player
        snapshots: The player's snapshots for the team's finished games; one
            per game appeared in
        membership: Team membership, used for jersey number and position

    Returns:
        AggregatedPlayerStats with games_played equal to the snapshot count
    """
    return build_aggregated_stats(
        player_id=player.id,
        player_name=player.name,
        totals=sum_stat_lines(snapshots),
        games_played=len(snapshots),
        jersey_number=membership.jersey_number if membership else None,
        position=membership.position if membership else None,
    )


def aggregate_career(
    player: PlayerInfo,
    season_stats: Iterable[AggregatedPlayerStats],
) -> AggregatedPlayerStats:
    """Sum season lines into career totals and re-derive every ratio."""
    season_stats = list(season_stats)
    return build_aggregated_stats(
        player_id=player.id,
        player_name=player.name,
        totals=sum_stat_lines(season_stats),
        games_played=sum(stats.games_played for stats in season_stats),
    )


def to_recent_game(game: GameInfo) -> RecentGame:
    return RecentGame(
        id=game.id,
        date=game.date,
        opponent=game.opponent,
        home_score=game.home_score,
        away_score=game.away_score,
        result=game.result,
    )


def aggregate_team_season(
    team: TeamInfo,
    games: Sequence[GameInfo],
    snapshots: Sequence[TeamStatsSnapshot],
    recent_limit: int = 10,
) -> TeamSeasonStats:
    """
    Aggregate a team's finished games and snapshots into season stats.

    Averages divide by the number of finished games, even when a game has
    no snapshot. Team percentages are the mean of the stored per-game
    percentages rather than a re-derivation from summed made/attempted.

    Args:
        team: The team
        games: Finished games, newest first
        snapshots: Team snapshots for those games
        recent_limit: How many games to list in recent_games

    Returns:
        TeamSeasonStats
    """
    games_played = len(games)
    wins = sum(1 for game in games if game.result == GameResult.WIN)

    totals = {name: 0 for name in STAT_LINE_FIELDS}
    percentage_sums = {name: 0.0 for name in TEAM_PERCENTAGE_FIELDS}
    for snapshot in snapshots:
        for name in STAT_LINE_FIELDS:
            totals[name] += getattr(snapshot, name)
        for name in TEAM_PERCENTAGE_FIELDS:
            percentage_sums[name] += getattr(snapshot, name)

    averages = {
        field: per_game(totals[source], games_played)
        for field, source in TEAM_AVERAGE_FIELDS.items()
    }
    percentages = {
        name: per_game(percentage_sums[name], games_played)
        for name in TEAM_PERCENTAGE_FIELDS
    }

    return TeamSeasonStats(
        team_id=team.id,
        team_name=team.name,
        games_played=games_played,
        wins=wins,
        losses=games_played - wins,
        recent_games=[to_recent_game(game) for game in games[:recent_limit]],
        **averages,
        **percentages,
    )


def empty_player_stats(entry: RosterEntry) -> AggregatedPlayerStats:
    """All-zero season line for a roster member with no finished games."""
    return AggregatedPlayerStats(
        player_id=entry.player_id,
        player_name=entry.player_name or "",
        jersey_number=entry.jersey_number,
        position=entry.position,
    )
