"""
Event interpreter.

Turns one raw game event into stat deltas for exactly one player. Event
metadata is free-form JSON whose meaning depends on the event type, so it is
first parsed into a typed detail (a tagged union) and then applied to the
player's accumulator by an exhaustive dispatch.

Malformed metadata never raises: documented defaults apply instead, so one
corrupt event cannot abort a whole game's stats.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from ..core.models import GameEvent
from ..core.types import COUNTING_EVENT_FIELDS, TIMELINE_EVENT_TYPES, GameEventType

# A shot without a usable point value is scored as a regular field goal
DEFAULT_SHOT_POINTS = 2
FREE_THROW_POINTS = 1
THREE_POINT_POINTS = 3

OFFENSIVE_REBOUND = "offensive"


# =============================================================================
# Event details (tagged union over event types)
# =============================================================================


@dataclass(frozen=True)
class ShotDetail:
    made: bool
    points: int  # 1 (free throw), 2 or 3


@dataclass(frozen=True)
class ReboundDetail:
    offensive: bool


@dataclass(frozen=True)
class CountingDetail:
    """Event that bumps a single counter (assist, steal, block, turnover, foul)."""

    field: str


@dataclass(frozen=True)
class TimelineDetail:
    """Substitution or timeout: no statistical effect."""

    event_type: GameEventType


EventDetail = Union[ShotDetail, ReboundDetail, CountingDetail, TimelineDetail]


# =============================================================================
# Accumulator
# =============================================================================


@dataclass
class StatLine:
    """Mutable per-player accumulator used while folding one game's events.

    Two-point and three-point attempts are kept in separate buckets here and
    merged into field-goal totals once the whole log has been applied.
    """

    player_id: str
    player_name: str
    points: int = 0
    rebounds: int = 0
    offensive_rebounds: int = 0
    defensive_rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    fouls: int = 0
    two_pointers_made: int = 0
    two_pointers_attempted: int = 0
    three_pointers_made: int = 0
    three_pointers_attempted: int = 0
    free_throws_made: int = 0
    free_throws_attempted: int = 0

    @property
    def field_goals_made(self) -> int:
        return self.two_pointers_made + self.three_pointers_made

    @property
    def field_goals_attempted(self) -> int:
        return self.two_pointers_attempted + self.three_pointers_attempted


# =============================================================================
# Metadata parsing
# =============================================================================


def parse_shot_points(value: Any) -> int:
    """Parse a shot's point value, defaulting to a two-pointer.

    Args:
        value: Raw ``points`` metadata (int, float, numeric string or missing)

    Returns:
        1, 2 or 3
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_SHOT_POINTS

    if isinstance(value, str):
        value = value.strip()

    try:
        points = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SHOT_POINTS

    if points in (FREE_THROW_POINTS, THREE_POINT_POINTS):
        return int(points)
    return DEFAULT_SHOT_POINTS


def parse_flag(value: Any) -> bool:
    """Parse a boolean flag such as ``made`` from loosely typed JSON."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    if isinstance(value, (int, float)):
        return value != 0
    return False


def parse_rebound_offensive(value: Any) -> bool:
    """Offensive only when explicitly marked so; anything else is defensive."""
    return isinstance(value, str) and value.strip().lower() == OFFENSIVE_REBOUND


def parse_event_detail(
    event_type: GameEventType,
    metadata: Mapping[str, Any] | None,
) -> EventDetail:
    """Parse an event's metadata into its typed detail.

    Args:
        event_type: The event's type
        metadata: Raw metadata mapping (may be None or missing keys)

    Returns:
        The detail variant for ``event_type``
    """
    meta = metadata if isinstance(metadata, Mapping) else {}

    if event_type == GameEventType.SHOT:
        return ShotDetail(
            made=parse_flag(meta.get("made")),
            points=parse_shot_points(meta.get("points")),
        )
    if event_type == GameEventType.REBOUND:
        return ReboundDetail(offensive=parse_rebound_offensive(meta.get("type")))
    if event_type in COUNTING_EVENT_FIELDS:
        return CountingDetail(field=COUNTING_EVENT_FIELDS[event_type])
    if event_type in TIMELINE_EVENT_TYPES:
        return TimelineDetail(event_type=event_type)

    raise ValueError(f"Unknown event type: {event_type}")


# =============================================================================
# Interpretation
# =============================================================================


def apply_detail(line: StatLine, detail: EventDetail) -> None:
    """Apply one parsed event detail to a player's accumulator."""
    if isinstance(detail, ShotDetail):
        if detail.points == THREE_POINT_POINTS:
            line.three_pointers_attempted += 1
            if detail.made:
                line.three_pointers_made += 1
                line.points += THREE_POINT_POINTS
        elif detail.points == FREE_THROW_POINTS:
            line.free_throws_attempted += 1
            if detail.made:
                line.free_throws_made += 1
                line.points += FREE_THROW_POINTS
        else:
            line.two_pointers_attempted += 1
            if detail.made:
                line.two_pointers_made += 1
                line.points += DEFAULT_SHOT_POINTS
    elif isinstance(detail, ReboundDetail):
        line.rebounds += 1
        if detail.offensive:
            line.offensive_rebounds += 1
        else:
            line.defensive_rebounds += 1
    elif isinstance(detail, CountingDetail):
        setattr(line, detail.field, getattr(line, detail.field) + 1)
    elif isinstance(detail, TimelineDetail):
        pass
    else:
        raise TypeError(f"Unhandled event detail: {detail!r}")


def apply_event(line: StatLine, event: GameEvent) -> None:
    """Interpret one event against the accumulator of its player."""
    apply_detail(line, parse_event_detail(event.event_type, event.metadata))


def resolves_to_player(event: GameEvent) -> bool:
    """Whether the event belongs to a known player.

    Team-level events (timeouts) carry no player, and events whose player row
    no longer exists have no name to report; both are skipped for stats.
    """
    return bool(event.player_id) and event.player_name is not None
