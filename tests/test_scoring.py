import pytest

from fantasy_cricket.models import PlayerMatchPoints, TeamMatchScore
from fantasy_cricket.services.errors import NotFoundError
from fantasy_cricket.services.scoring import (
    calc_team_match_points,
    calculate_match_points,
    final_points,
    league_leaderboard,
)
from helpers import BASE_XI, before_season


def test_final_points_multipliers():
    assert final_points(10, is_captain=True) == 20
    assert final_points(10, is_vice_captain=True) == 15
    assert final_points(10) == 10


def test_vice_captain_points_are_floored():
    # 7 * 1.5 = 10.5 -> 10, -3 * 1.5 = -4.5 -> -5
    assert final_points(7, is_vice_captain=True) == 10
    assert final_points(-3, is_vice_captain=True) == -5


def _points(player_id, _match_id):
    return {"k1": 30, "bowl1": 7, "bat1": 12, "bat5": 99}.get(player_id, 1)


def test_team_match_points_breakdown(db, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, captain_id="k1", vice_captain_id="bowl1", now=before_season())

    result = calc_team_match_points(db, team.id, matches[0].id, _points)

    assert result["captain_points"] == 60
    assert result["vice_captain_points"] == 10
    # bat1 plus eight others at 1 point each; bat5 is on the bench
    assert result["regular_points"] == 12 + 8
    assert result["total_points"] == 60 + 10 + 20


def test_team_without_lineup_is_not_scored(db, matches, team):
    assert calc_team_match_points(db, team.id, matches[0].id, _points) is None


def test_calculate_match_points_persists_and_completes(db, league, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, now=before_season())

    result = calculate_match_points(db, matches[0].id, _points)

    assert result["teams_scored"] == 1
    assert result["completed"] is True
    row = db.get(TeamMatchScore, (team.id, matches[0].id))
    assert float(row.total_points) == 90
    assert matches[0].is_completed is True

    # a rerun overwrites instead of duplicating
    calculate_match_points(db, matches[0].id, lambda pid, mid: 2)
    assert db.query(TeamMatchScore).count() == 1
    assert float(db.get(TeamMatchScore, (team.id, matches[0].id)).total_points) == 4 + 3 + 18


def test_points_can_come_from_the_database(db, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, now=before_season())
    db.add_all(
        [
            PlayerMatchPoints(match_id=matches[0].id, player_id="k1", points=25),
            PlayerMatchPoints(match_id=matches[0].id, player_id="bat2", points=40),
        ]
    )
    db.commit()

    result = calculate_match_points(db, matches[0].id, mark_completed=False)

    assert result["completed"] is False
    assert result["scores"][0]["total_points"] == 50 + 40


def test_unknown_match(db):
    with pytest.raises(NotFoundError):
        calculate_match_points(db, 12345)


def test_leaderboard_orders_by_total(db, league, matches, team, save_xi, make_team):
    rival = make_team(league, name="Team B")
    save_xi(matches[0], BASE_XI, captain_id="k1", now=before_season())
    save_xi(matches[0], BASE_XI, captain_id="bat1", now=before_season(), for_team=rival)
    make_team(league, name="Team C")

    calculate_match_points(db, matches[0].id, _points)
    board = league_leaderboard(db, league.id)

    assert [entry["team_name"] for entry in board] == ["Team A", "Team B", "Team C"]
    assert [entry["rank"] for entry in board] == [1, 2, 3]
    assert board[0]["total_points"] == 90
    assert board[2]["matches_played"] == 0
    assert board[2]["total_points"] == 0
