from datetime import timedelta, timezone

from fantasy_cricket.models import FantasyLeague, LeagueMatch
from fantasy_cricket.services.timeline import (
    as_utc,
    first_match,
    is_editable,
    is_locked,
    list_matches,
    matches_before,
    next_match,
    previous_match,
)
from helpers import T0


def test_lock_is_reached_exactly_at_start(db, matches):
    match = matches[0]
    assert is_locked(match, T0 - timedelta(seconds=1)) is False
    assert is_locked(match, T0) is True
    assert is_editable(match, T0 - timedelta(seconds=1)) is True
    assert is_editable(match, T0) is False


def test_lock_never_reverts(db, matches):
    match = matches[1]
    start = as_utc(match.match_start)
    checkpoints = [start + timedelta(minutes=m) for m in range(-30, 240, 15)]
    states = [is_locked(match, moment) for moment in checkpoints]
    first_locked = states.index(True)
    assert all(states[first_locked:])
    assert not any(states[:first_locked])


def test_completed_match_is_not_editable(db, matches):
    match = matches[2]
    match.is_completed = True
    db.commit()
    assert is_editable(match, T0 - timedelta(days=1)) is False


def test_naive_datetimes_are_treated_as_utc():
    naive = T0.replace(tzinfo=None)
    assert as_utc(naive) == T0
    assert as_utc(naive).tzinfo is timezone.utc


def test_previous_and_next(db, matches):
    assert previous_match(db, matches[0]) is None
    assert previous_match(db, matches[2]).id == matches[1].id
    assert next_match(db, matches[2]).id == matches[3].id
    assert next_match(db, matches[4]) is None
    assert first_match(db, matches[0].league_id).id == matches[0].id


def test_same_start_is_ordered_by_id(db, league, matches):
    twin = LeagueMatch(
        league_id=league.id,
        match_description="Double header",
        match_start=matches[1].match_start,
    )
    db.add(twin)
    db.commit()

    assert previous_match(db, twin).id == matches[1].id
    assert next_match(db, matches[1]).id == twin.id
    assert next_match(db, twin).id == matches[2].id
    assert [m.id for m in list_matches(db, league.id)][:3] == [matches[0].id, matches[1].id, twin.id]


def test_matches_before_is_oldest_first(db, matches):
    assert [m.id for m in matches_before(db, matches[3])] == [m.id for m in matches[:3]]
    assert matches_before(db, matches[0]) == []


def test_other_leagues_are_ignored(db, matches):
    other = FantasyLeague(name="Other League", transfer_limit=5)
    db.add(other)
    db.commit()
    stray = LeagueMatch(league_id=other.id, match_start=matches[2].match_start - timedelta(hours=1))
    db.add(stray)
    db.commit()

    assert previous_match(db, matches[2]).id == matches[1].id
    assert previous_match(db, stray) is None
