import pytest

from fantasy_cricket.services.lineups import Lineup, PlayerRef
from fantasy_cricket.services.validation import (
    LineupRules,
    RoleClass,
    bowling_overs,
    classify_role,
    describe,
    role_summary,
    validate_lineup,
)
from helpers import BASE_XI, SQUAD, SQUAD_BY_ID, make_lineup, swap


@pytest.mark.parametrize(
    "label, expected",
    [
        ("WK-Batsman", RoleClass.KEEPER),
        ("Wicketkeeper Batter", RoleClass.KEEPER),
        ("wk", RoleClass.KEEPER),
        ("Batsman", RoleClass.BATTER),
        ("Top-order Batter", RoleClass.BATTER),
        ("Bowler", RoleClass.BOWLER),
        ("Bowling Allrounder", RoleClass.BOWLING_ALLROUNDER),
        ("Batting All-Rounder", RoleClass.BATTING_ALLROUNDER),
        ("batting all rounder", RoleClass.BATTING_ALLROUNDER),
        ("Allrounder", RoleClass.UNKNOWN),
        ("Coach", RoleClass.UNKNOWN),
        ("", RoleClass.UNKNOWN),
        (None, RoleClass.UNKNOWN),
    ],
)
def test_classify_role(label, expected):
    assert classify_role(label) is expected


def test_bowling_overs_per_role():
    roles = [
        RoleClass.BOWLER,
        RoleClass.BOWLING_ALLROUNDER,
        RoleClass.BATTING_ALLROUNDER,
        RoleClass.BATTER,
        RoleClass.KEEPER,
        RoleClass.UNKNOWN,
    ]
    assert bowling_overs(roles) == 10


def test_role_summary_of_base_xi():
    summary = role_summary(SQUAD_BY_ID[pid] for pid in BASE_XI)
    assert summary["keeper"] == 1
    assert summary["batter"] == 4
    assert summary["bowler"] == 4
    assert summary["bowling_allrounder"] == 1
    assert summary["batting_allrounder"] == 1
    assert summary["overs"] == 22


def test_valid_lineup_has_no_errors():
    assert validate_lineup(make_lineup(BASE_XI), SQUAD_BY_ID, LineupRules()) == []


def test_wrong_player_count():
    errors = validate_lineup(make_lineup(BASE_XI[:10]), SQUAD_BY_ID, LineupRules())
    assert errors == ["lineup_must_have_11_players"]


def test_duplicate_players_count_as_wrong_size():
    ids = BASE_XI[:10] + ["k1"]
    assert validate_lineup(make_lineup(ids), SQUAD_BY_ID) == ["lineup_must_have_11_players"]


def test_size_is_checked_before_captaincy():
    lineup = make_lineup(BASE_XI[:9], captain_id="k1", vice_captain_id="k1")
    assert validate_lineup(lineup, SQUAD_BY_ID) == ["lineup_must_have_11_players"]


def test_captain_and_vice_captain_must_differ():
    lineup = make_lineup(BASE_XI, captain_id="bat1", vice_captain_id="bat1")
    assert validate_lineup(lineup, SQUAD_BY_ID) == ["captain_vice_captain_same"]


def test_captain_must_be_selected():
    lineup = make_lineup(BASE_XI, captain_id="bat5")
    assert validate_lineup(lineup, SQUAD_BY_ID) == ["captain_not_in_lineup"]


def test_vice_captain_must_be_selected():
    lineup = make_lineup(BASE_XI, vice_captain_id="bowl5")
    assert validate_lineup(lineup, SQUAD_BY_ID) == ["vice_captain_not_in_lineup"]


def test_players_must_belong_to_squad():
    squad = {pid: ref for pid, ref in SQUAD_BY_ID.items() if pid != "bat4"}
    assert validate_lineup(make_lineup(BASE_XI), squad) == ["players_not_in_squad"]


def test_needs_a_wicketkeeper():
    lineup = make_lineup(swap(BASE_XI, "k1", "bat5"), captain_id="bat1")
    assert validate_lineup(lineup, SQUAD_BY_ID) == ["lineup_needs_wicketkeeper"]


def test_needs_minimum_bowling_overs():
    # 3 bowlers + bowling AR + batting AR = 18 overs
    lineup = make_lineup(swap(BASE_XI, "bowl1", "bat5"), vice_captain_id="bowl2")
    assert validate_lineup(lineup, SQUAD_BY_ID) == ["lineup_bowling_overs_below_minimum"]


def test_squad_roles_override_client_roles():
    """A client claiming a batter is a bowler does not change the overs count."""
    lineup = make_lineup(swap(BASE_XI, "bowl1", "bat5"), vice_captain_id="bowl2")
    forged = Lineup(
        players=tuple(
            PlayerRef(p.player_id, p.name, "Bowler", p.squad_tag) for p in lineup.players
        ),
        captain_id=lineup.captain_id,
        vice_captain_id=lineup.vice_captain_id,
    )
    assert validate_lineup(forged, SQUAD_BY_ID) == ["lineup_bowling_overs_below_minimum"]


def test_rules_are_configurable():
    rules = LineupRules(lineup_size=11, min_wicketkeepers=2, min_bowling_overs=20)
    assert validate_lineup(make_lineup(BASE_XI), SQUAD_BY_ID, rules) == ["lineup_needs_wicketkeeper"]

    ids = swap(BASE_XI, "bat4", "k2")
    assert validate_lineup(make_lineup(ids), SQUAD_BY_ID, rules) == []


def test_describe_codes():
    assert describe("lineup_must_have_11_players") == "A Playing XI needs exactly 11 distinct players."
    assert "wicketkeeper" in describe("lineup_needs_wicketkeeper")
    assert describe("something_else") == "something_else"


def test_squad_fixture_is_unique():
    assert len({p.player_id for p in SQUAD}) == len(SQUAD)
