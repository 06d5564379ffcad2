from datetime import timedelta

from fantasy_cricket.services.baseline import resolve_baseline, resolve_baseline_with_match
from fantasy_cricket.services.lineups import replace_lineup
from helpers import BASE_XI, make_lineup, swap


def _store(db, team, match, player_ids, **kwargs):
    replace_lineup(
        db,
        team_id=team.id,
        league_id=team.league_id,
        match_id=match.id,
        lineup=make_lineup(player_ids, **kwargs),
    )
    db.commit()


def test_first_match_has_no_baseline(db, matches, team):
    assert resolve_baseline(db, team.id, matches[0], matches[0].match_start) is None


def test_immediate_locked_predecessor(db, matches, team):
    _store(db, team, matches[0], BASE_XI)
    _store(db, team, matches[1], swap(BASE_XI, "bat4", "bat5"))

    now = matches[1].match_start + timedelta(minutes=5)
    lineup, match = resolve_baseline_with_match(db, team.id, matches[2], now)

    assert match.id == matches[1].id
    assert "bat5" in lineup.player_ids


def test_walks_back_over_gaps(db, matches, team):
    """A locked match without a lineup is skipped, not treated as empty."""
    _store(db, team, matches[0], BASE_XI, captain_id="bat1")

    now = matches[2].match_start + timedelta(minutes=5)
    lineup, match = resolve_baseline_with_match(db, team.id, matches[3], now)

    assert match.id == matches[0].id
    assert lineup.captain_id == "bat1"


def test_unlocked_predecessor_is_not_a_baseline(db, matches, team):
    _store(db, team, matches[0], BASE_XI)
    _store(db, team, matches[1], swap(BASE_XI, "bat4", "bat5"))

    # match 2 has a lineup but has not started yet
    now = matches[0].match_start + timedelta(minutes=5)
    lineup, match = resolve_baseline_with_match(db, team.id, matches[2], now)

    assert match.id == matches[0].id
    assert "bat5" not in lineup.player_ids


def test_baseline_is_per_team(db, league, matches, team, make_team):
    rival = make_team(league, name="Team B")
    _store(db, rival, matches[0], BASE_XI)

    now = matches[0].match_start + timedelta(minutes=5)
    assert resolve_baseline(db, team.id, matches[1], now) is None
    assert resolve_baseline(db, rival.id, matches[1], now) is not None
