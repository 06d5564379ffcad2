import os

os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fantasy_cricket.db.base import Base
from fantasy_cricket.models import FantasyLeague, FantasyTeam, LeagueMatch
from fantasy_cricket.services.playing_xi import save_playing_xi
from fantasy_cricket.services.squads import replace_squad
from helpers import SQUAD, T0


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def league(db):
    league = FantasyLeague(name="Premier Fantasy League", transfer_limit=10)
    db.add(league)
    db.commit()
    return league


@pytest.fixture
def matches(db, league):
    rows = [
        LeagueMatch(
            league_id=league.id,
            match_description=f"Match {index + 1}",
            match_start=T0 + timedelta(days=index),
        )
        for index in range(5)
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def make_team(db):
    def _make(league, name="Team A", squad=SQUAD):
        team = FantasyTeam(league_id=league.id, team_name=name)
        db.add(team)
        db.commit()
        replace_squad(db, team.id, squad)
        return team

    return _make


@pytest.fixture
def team(league, make_team):
    return make_team(league)


@pytest.fixture
def save_xi(db, league, team):
    """Save a Playing XI by player ids; defaults to the ``team`` fixture."""

    def _save(match, player_ids, captain_id="k1", vice_captain_id="bowl1", *, now, for_team=None):
        return save_playing_xi(
            db,
            league_id=league.id,
            team_id=(for_team or team).id,
            match_id=match.id,
            players=[{"player_id": pid} for pid in player_ids],
            captain_id=captain_id,
            vice_captain_id=vice_captain_id,
            now=now,
        )

    return _save
