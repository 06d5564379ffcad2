from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, tuple_
from sqlalchemy.orm import Session

from fantasy_cricket.models import LeagueMatch


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored start is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_locked(match: LeagueMatch, now: Optional[datetime] = None) -> bool:
    """A match locks once wall-clock time reaches its scheduled start."""
    current = as_utc(now) if now is not None else utcnow()
    return current >= as_utc(match.match_start)


def is_editable(match: LeagueMatch, now: Optional[datetime] = None) -> bool:
    return not match.is_completed and not is_locked(match, now)


def get_match(db: Session, league_id: int, match_id: int) -> Optional[LeagueMatch]:
    return db.execute(
        select(LeagueMatch).where(LeagueMatch.id == match_id, LeagueMatch.league_id == league_id)
    ).scalar_one_or_none()


def list_matches(db: Session, league_id: int) -> List[LeagueMatch]:
    return (
        db.execute(
            select(LeagueMatch)
            .where(LeagueMatch.league_id == league_id)
            .order_by(LeagueMatch.match_start, LeagueMatch.id)
        )
        .scalars()
        .all()
    )


def first_match(db: Session, league_id: int) -> Optional[LeagueMatch]:
    return (
        db.execute(
            select(LeagueMatch)
            .where(LeagueMatch.league_id == league_id)
            .order_by(LeagueMatch.match_start, LeagueMatch.id)
            .limit(1)
        )
        .scalars()
        .first()
    )


def previous_match(db: Session, match: LeagueMatch) -> Optional[LeagueMatch]:
    """Match of the same league with the largest (start, id) key below ``match``."""
    return (
        db.execute(
            select(LeagueMatch)
            .where(
                LeagueMatch.league_id == match.league_id,
                tuple_(LeagueMatch.match_start, LeagueMatch.id)
                < tuple_(match.match_start, match.id),
            )
            .order_by(LeagueMatch.match_start.desc(), LeagueMatch.id.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )


def next_match(db: Session, match: LeagueMatch) -> Optional[LeagueMatch]:
    return (
        db.execute(
            select(LeagueMatch)
            .where(
                LeagueMatch.league_id == match.league_id,
                tuple_(LeagueMatch.match_start, LeagueMatch.id)
                > tuple_(match.match_start, match.id),
            )
            .order_by(LeagueMatch.match_start, LeagueMatch.id)
            .limit(1)
        )
        .scalars()
        .first()
    )


def matches_before(db: Session, match: LeagueMatch) -> List[LeagueMatch]:
    """Every match ordered strictly before ``match``, oldest first."""
    return (
        db.execute(
            select(LeagueMatch)
            .where(
                LeagueMatch.league_id == match.league_id,
                tuple_(LeagueMatch.match_start, LeagueMatch.id)
                < tuple_(match.match_start, match.id),
            )
            .order_by(LeagueMatch.match_start, LeagueMatch.id)
        )
        .scalars()
        .all()
    )
