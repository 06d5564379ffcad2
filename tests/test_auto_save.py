from datetime import timedelta

from fantasy_cricket.models import ActionLog, FantasyLeague, LeagueMatch
from fantasy_cricket.services.auto_save import (
    ALREADY_SAVED,
    COPIED,
    FIRST_MATCH,
    PREVIOUS_LINEUP_MISSING,
    copy_forward,
    propagate_all,
)
from fantasy_cricket.services.lineups import get_lineup, has_lineup, lineup_flags
from fantasy_cricket.services.playing_xi import get_transfer_stats
from helpers import BASE_XI, after, before_season, swap

XI_2 = swap(BASE_XI, "bat4", "bat5")


def _statuses(result):
    return [(item["match_id"], item["status"]) for item in result["results"]]


def test_missed_deadline_is_copied_from_previous_match(db, league, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, now=before_season())
    save_xi(matches[1], XI_2, captain_id="bat1", now=after(matches[0]))
    before = get_transfer_stats(db, league_id=league.id, team_id=team.id)

    result = propagate_all(db, now=after(matches[2]))

    assert result["lineups_copied"] == 1
    assert result["skipped"] == 0
    source = get_lineup(db, team.id, matches[1].id)
    copied = get_lineup(db, team.id, matches[2].id)
    assert copied.is_auto_saved is True
    assert copied.same_selection(source)
    assert [p.name for p in copied.players] == [p.name for p in source.players]

    after_stats = get_transfer_stats(db, league_id=league.id, team_id=team.id)
    assert after_stats["transfers_used"] == before["transfers_used"] == 2
    assert after_stats["per_match"][-1]["total"] == 0


def test_propagation_is_idempotent(db, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, now=before_season())
    now = after(matches[2])

    first = propagate_all(db, now=now)
    second = propagate_all(db, now=now)

    assert first["lineups_copied"] == 2
    assert second["lineups_copied"] == 0
    assert all(status == ALREADY_SAVED for status in (copy_forward(db, team, m)[0] for m in matches[:3]))


def test_chain_is_filled_oldest_first(db, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, now=before_season())

    result = propagate_all(db, now=after(matches[3]))

    assert _statuses(result) == [
        (matches[1].id, COPIED),
        (matches[2].id, COPIED),
        (matches[3].id, COPIED),
    ]
    row_sources = [item["source_match_id"] for item in result["results"]]
    assert row_sources == [matches[0].id, matches[1].id, matches[2].id]
    assert set(lineup_flags(db, team.id, matches[0].league_id)) == {m.id for m in matches[:4]}


def test_missing_source_is_skipped_not_invented(db, matches, team):
    result = propagate_all(db, now=after(matches[1]))

    assert _statuses(result) == [
        (matches[0].id, FIRST_MATCH),
        (matches[1].id, PREVIOUS_LINEUP_MISSING),
    ]
    assert result["skipped"] == 2
    assert result["lineups_copied"] == 0
    assert not has_lineup(db, team.id, matches[1].id)


def test_open_and_completed_matches_are_left_alone(db, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, now=before_season())
    matches[1].is_completed = True
    db.commit()

    result = propagate_all(db, now=after(matches[1]))

    assert result["matches_processed"] == 1
    assert result["lineups_copied"] == 0
    assert not has_lineup(db, team.id, matches[1].id)
    assert not has_lineup(db, team.id, matches[2].id)


def test_dry_run_writes_nothing(db, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, now=before_season())

    result = propagate_all(db, now=after(matches[2]), apply=False)

    assert result["apply"] is False
    assert result["lineups_copied"] == 2
    assert not has_lineup(db, team.id, matches[1].id)
    assert not has_lineup(db, team.id, matches[2].id)
    assert db.query(ActionLog).filter_by(action="auto_save").count() == 0


def test_applied_pass_is_logged(db, matches, team, save_xi):
    save_xi(matches[0], BASE_XI, now=before_season())

    propagate_all(db, now=after(matches[1]))

    entry = db.query(ActionLog).filter_by(category="playing_xi", action="auto_save").one()
    assert '"lineups_copied": 1' in entry.details


def test_every_team_in_the_league_is_checked(db, league, matches, team, save_xi, make_team):
    rival = make_team(league, name="Team B")
    save_xi(matches[0], BASE_XI, now=before_season())
    save_xi(matches[0], XI_2, captain_id="bat1", now=before_season(), for_team=rival)

    result = propagate_all(db, now=after(matches[1]))

    assert result["team_checks"] == 4
    assert result["lineups_copied"] == 2
    assert get_lineup(db, rival.id, matches[1].id).captain_id == "bat1"
    assert get_lineup(db, team.id, matches[1].id).captain_id == "k1"


def test_league_filter(db, matches, team, save_xi, make_team):
    other = FantasyLeague(name="Second League", transfer_limit=10)
    db.add(other)
    db.commit()
    other_match = LeagueMatch(league_id=other.id, match_start=matches[0].match_start - timedelta(hours=2))
    db.add(other_match)
    db.commit()
    make_team(other, name="Elsewhere")
    save_xi(matches[0], BASE_XI, now=before_season())

    result = propagate_all(db, now=after(matches[1]), league_id=matches[0].league_id)

    assert result["leagues_checked"] == 1
    assert {item["league_id"] for item in result["results"]} == {matches[0].league_id}
