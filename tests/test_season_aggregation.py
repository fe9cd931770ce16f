"""
Tests for season and career aggregation over persisted snapshots.
"""

from datetime import datetime

from courtside_stats.aggregators.season import (
    aggregate_career,
    aggregate_player_season,
    aggregate_team_season,
    efficiency,
    empty_player_stats,
    per_game,
)
from courtside_stats.core.models import (
    GameInfo,
    PlayerInfo,
    PlayerStatsSnapshot,
    RosterEntry,
    TeamInfo,
    TeamStatsSnapshot,
)
from courtside_stats.core.types import GameResult, GameStatus

PLAYER = PlayerInfo(id="p1", name="Ava")
TEAM = TeamInfo(id="t1", name="Hawks")


def snapshot(game_id: str, **stats) -> PlayerStatsSnapshot:
    return PlayerStatsSnapshot(player_id="p1", game_id=game_id, **stats)


def team_snapshot(game_id: str, **stats) -> TeamStatsSnapshot:
    return TeamStatsSnapshot(team_id="t1", game_id=game_id, **stats)


def game(game_id: str, day: int, home: int, away: int) -> GameInfo:
    return GameInfo(
        id=game_id,
        team_id="t1",
        team_name="Hawks",
        status=GameStatus.FINISHED,
        home_score=home,
        away_score=away,
        opponent=f"Opponent {game_id}",
        date=datetime(2025, 1, day),
    )


SEASON_SNAPSHOTS = [
    snapshot(
        "g1", points=10, rebounds=5, assists=2, steals=1, turnovers=3,
        field_goals_made=4, field_goals_attempted=9,
        free_throws_made=2, free_throws_attempted=2,
    ),
    snapshot(
        "g2", points=5, rebounds=2, assists=1, blocks=1,
        field_goals_made=2, field_goals_attempted=6,
        three_pointers_made=1, three_pointers_attempted=3,
        free_throws_made=0, free_throws_attempted=2,
    ),
]


class TestPerGame:
    def test_rounds_half_up(self):
        assert per_game(5, 4) == 1.3

    def test_zero_games(self):
        assert per_game(10, 0) == 0

    def test_efficiency_zero_games(self):
        totals = {
            "points": 3, "rebounds": 0, "assists": 0, "steals": 0, "blocks": 0,
            "turnovers": 0, "field_goals_made": 1, "field_goals_attempted": 1,
            "free_throws_made": 0, "free_throws_attempted": 0,
        }
        assert efficiency(totals, 0) == 0


class TestPlayerSeason:
    def test_sums_and_derives(self):
        membership = RosterEntry(player_id="p1", jersey_number=7, position="F")

        stats = aggregate_player_season(PLAYER, SEASON_SNAPSHOTS, membership)

        assert stats.games_played == 2
        assert stats.points == 15
        assert stats.rebounds == 7
        assert (stats.field_goals_made, stats.field_goals_attempted) == (6, 15)
        assert stats.field_goal_percentage == 40.0
        assert stats.three_point_percentage == 33.3
        assert stats.free_throw_percentage == 50.0
        assert stats.points_per_game == 7.5
        assert stats.rebounds_per_game == 3.5
        assert stats.assists_per_game == 1.5
        assert stats.steals_per_game == 0.5
        assert stats.blocks_per_game == 0.5
        assert stats.turnovers_per_game == 1.5
        # (15 + 7 + 3 + 1 + 1 - 9 - 2 - 3) / 2
        assert stats.efficiency == 6.5
        assert stats.jersey_number == 7
        assert stats.position == "F"

    def test_zero_appearances(self):
        stats = aggregate_player_season(PLAYER, [])

        assert stats.games_played == 0
        assert stats.points == 0
        assert stats.points_per_game == 0
        assert stats.efficiency == 0
        assert stats.field_goal_percentage == 0

    def test_empty_player_stats(self):
        entry = RosterEntry(player_id="p4", player_name="Dee", jersey_number=4)

        stats = empty_player_stats(entry)

        assert stats.player_name == "Dee"
        assert stats.jersey_number == 4
        assert stats.games_played == 0
        assert stats.points_per_game == 0


class TestCareer:
    def test_sums_seasons_and_rederives(self):
        season_a = aggregate_player_season(PLAYER, SEASON_SNAPSHOTS)
        season_b = aggregate_player_season(
            PLAYER,
            [
                snapshot(
                    "g9", points=9, rebounds=4, turnovers=1,
                    field_goals_made=3, field_goals_attempted=5,
                    three_pointers_made=1, three_pointers_attempted=1,
                    free_throws_made=2, free_throws_attempted=2,
                )
            ],
        )

        career = aggregate_career(PLAYER, [season_a, season_b])

        assert career.games_played == 3
        assert career.points == season_a.points + season_b.points == 24
        assert career.field_goal_percentage == 45.0
        assert career.three_point_percentage == 50.0
        assert career.free_throw_percentage == 66.7
        assert career.points_per_game == 8.0
        assert career.rebounds_per_game == 3.7
        assert career.efficiency == 7.7
        assert career.jersey_number is None

    def test_no_visible_seasons(self):
        career = aggregate_career(PLAYER, [])

        assert career.games_played == 0
        assert career.efficiency == 0


class TestTeamSeason:
    def test_record_and_averages(self):
        games = [game("g3", 3, 100, 90), game("g2", 2, 80, 85), game("g1", 1, 70, 60)]
        snapshots = [
            team_snapshot("g3", points=100, rebounds=40, field_goal_percentage=50.0),
            team_snapshot("g2", points=80, rebounds=35, field_goal_percentage=41.3),
        ]

        stats = aggregate_team_season(TEAM, games, snapshots, recent_limit=2)

        assert stats.games_played == 3
        assert (stats.wins, stats.losses) == (2, 1)
        # Divides by finished games, including g1 which has no snapshot
        assert stats.points_per_game == 60.0
        assert stats.rebounds_per_game == 25.0
        assert stats.field_goal_percentage == 30.4
        assert [g.id for g in stats.recent_games] == ["g3", "g2"]
        assert [g.result for g in stats.recent_games] == [GameResult.WIN, GameResult.LOSS]

    def test_percentages_are_mean_of_game_percentages(self):
        games = [game("g2", 2, 50, 40), game("g1", 1, 50, 40)]
        snapshots = [
            team_snapshot("g1", field_goals_made=1, field_goals_attempted=1, field_goal_percentage=100.0),
            team_snapshot("g2", field_goals_made=2, field_goals_attempted=10, field_goal_percentage=20.0),
        ]

        stats = aggregate_team_season(TEAM, games, snapshots)

        # Re-deriving from 3/11 would give 27.3
        assert stats.field_goal_percentage == 60.0

    def test_tie_counts_as_loss(self):
        stats = aggregate_team_season(TEAM, [game("g1", 1, 50, 50)], [])

        assert (stats.wins, stats.losses) == (0, 1)
        assert stats.recent_games[0].result == GameResult.LOSS

    def test_recent_games_limited_but_record_covers_all(self):
        games = [game(f"g{day}", day, 60, 50) for day in range(12, 0, -1)]

        stats = aggregate_team_season(TEAM, games, [], recent_limit=10)

        assert len(stats.recent_games) == 10
        assert stats.recent_games[0].id == "g12"
        assert stats.wins == 12

    def test_no_games(self):
        stats = aggregate_team_season(TEAM, [], [])

        assert stats.games_played == 0
        assert stats.points_per_game == 0
        assert stats.field_goal_percentage == 0
        assert stats.recent_games == []

    def test_serializes_with_camel_case(self):
        stats = aggregate_team_season(TEAM, [game("g1", 1, 60, 50)], [])

        payload = stats.model_dump(mode="json", by_alias=True)

        assert payload["teamName"] == "Hawks"
        assert payload["recentGames"][0]["result"] == "W"
        assert payload["recentGames"][0]["homeScore"] == 60
