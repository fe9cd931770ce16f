"""
Per-game player and team aggregation.

Folds a game's event log into one box-score line per player, then sums the
player lines into team totals. Both are pure functions over in-memory data
and can be re-derived at any time from the live event log.
"""

from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional, Sequence

from ..core.models import GameEvent, PlayerGameStats, RosterEntry, STAT_LINE_FIELDS, TeamGameStats
from .events import StatLine, apply_event, resolves_to_player


def round_half_up(value: float) -> float:
    """Round to the nearest integer, with .5 going toward +infinity.

    Python's round() uses banker's rounding; persisted history was produced
    with half-up rounding, so all stat rounding goes through here.
    """
    return float(math.floor(value + 0.5))


def percentage(made: int, attempted: int) -> float:
    """Shooting percentage with one decimal, 0 when nothing was attempted.

    Examples:
        >>> percentage(14, 27)
        51.9
        >>> percentage(1, 2)
        50.0
    """
    if attempted <= 0:
        return 0.0
    return round_half_up(made / attempted * 1000) / 10


def _shooting_percentages(line: Mapping[str, int]) -> dict[str, float]:
    return {
        "field_goal_percentage": percentage(
            line["field_goals_made"], line["field_goals_attempted"]
        ),
        "three_point_percentage": percentage(
            line["three_pointers_made"], line["three_pointers_attempted"]
        ),
        "free_throw_percentage": percentage(
            line["free_throws_made"], line["free_throws_attempted"]
        ),
    }


def _line_totals(line: StatLine) -> dict[str, int]:
    """Summable fields of an accumulator with 2pt/3pt buckets merged."""
    return {name: getattr(line, name) for name in STAT_LINE_FIELDS}


def with_percentages(totals: Mapping[str, int]) -> dict:
    """Counting totals plus the three percentages re-derived from them."""
    return {**totals, **_shooting_percentages(totals)}


def calculate_player_stats(
    events: Iterable[GameEvent],
    roster: Optional[Mapping[str, RosterEntry]] = None,
) -> list[PlayerGameStats]:
    """
    Build per-player box-score lines from a game's event log.

    Players are grouped in first-appearance order and the result is sorted
    by points descending; the sort is stable, so ties keep that order and
    the output is deterministic for a given log.

    Args:
        events: Game events in timestamp order
        roster: Optional mapping of player_id -> RosterEntry used for
            jersey number and position

    Returns:
        One PlayerGameStats per player with at least one attributable event
    """
    roster = roster or {}
    lines: dict[str, StatLine] = {}

    for event in events:
        if not resolves_to_player(event):
            continue

        line = lines.get(event.player_id)
        if line is None:
            line = StatLine(player_id=event.player_id, player_name=event.player_name)
            lines[event.player_id] = line

        apply_event(line, event)

    results = []
    for line in lines.values():
        entry = roster.get(line.player_id)
        results.append(
            PlayerGameStats(
                player_id=line.player_id,
                player_name=line.player_name,
                jersey_number=entry.jersey_number if entry else None,
                position=entry.position if entry else None,
                **with_percentages(_line_totals(line)),
            )
        )

    results.sort(key=lambda stats: -stats.points)
    return results


def sum_stat_lines(lines: Iterable) -> dict[str, int]:
    """Element-wise sum of the summable fields of any stat-line models."""
    totals = {name: 0 for name in STAT_LINE_FIELDS}
    for line in lines:
        for name in STAT_LINE_FIELDS:
            totals[name] += getattr(line, name)
    return totals


def calculate_team_totals(
    team_id: str,
    team_name: str,
    player_stats: Sequence[PlayerGameStats],
) -> TeamGameStats:
    """
    Sum player lines into team totals for one game.

    Percentages are recomputed from the summed made/attempted counts, never
    averaged from the player percentages.
    """
    totals = sum_stat_lines(player_stats)
    return TeamGameStats(team_id=team_id, team_name=team_name, **with_percentages(totals))
