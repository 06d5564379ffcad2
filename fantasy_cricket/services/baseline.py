from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from fantasy_cricket.models import LeagueMatch
from fantasy_cricket.services.lineups import Lineup, get_lineup
from fantasy_cricket.services.timeline import is_locked, previous_match


def resolve_baseline_with_match(
    db: Session,
    team_id: int,
    target: LeagueMatch,
    now: Optional[datetime] = None,
) -> Tuple[Optional[Lineup], Optional[LeagueMatch]]:
    """Walk back from ``target`` to the most recent locked match holding a lineup."""
    candidate = previous_match(db, target)
    while candidate is not None:
        if is_locked(candidate, now):
            lineup = get_lineup(db, team_id, candidate.id)
            if lineup is not None:
                return lineup, candidate
        candidate = previous_match(db, candidate)
    return None, None


def resolve_baseline(
    db: Session,
    team_id: int,
    target: LeagueMatch,
    now: Optional[datetime] = None,
) -> Optional[Lineup]:
    lineup, _ = resolve_baseline_with_match(db, team_id, target, now)
    return lineup
