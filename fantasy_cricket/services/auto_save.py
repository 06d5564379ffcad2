from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from fantasy_cricket.models import FantasyTeam, LeagueMatch
from fantasy_cricket.services.action_log import log_action
from fantasy_cricket.services.lineups import get_lineup, has_lineup, lock_team, replace_lineup
from fantasy_cricket.services.timeline import is_locked, matches_before, previous_match, utcnow

logger = logging.getLogger(__name__)

COPIED = "copied"
ALREADY_SAVED = "already_saved"
FIRST_MATCH = "first_match"
PREVIOUS_LINEUP_MISSING = "previous_lineup_missing"


@dataclass
class AutoSaveSummary:
    apply: bool
    leagues_checked: int = 0
    matches_processed: int = 0
    team_checks: int = 0
    lineups_copied: int = 0
    skipped: int = 0
    results: List[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "apply": self.apply,
            "leagues_checked": self.leagues_checked,
            "matches_processed": self.matches_processed,
            "team_checks": self.team_checks,
            "lineups_copied": self.lineups_copied,
            "skipped": self.skipped,
            "results": list(self.results),
        }


def copy_forward(
    db: Session,
    team: FantasyTeam,
    match: LeagueMatch,
    *,
    apply: bool = True,
    planned: Optional[Set[Tuple[int, int]]] = None,
) -> Tuple[str, Optional[int]]:
    """Copy the immediately previous match's lineup into ``match`` for ``team``.

    Returns ``(status, source_match_id)``. Never charges transfers and
    never invents a lineup: a missing source is reported, not filled.
    Does not commit.
    """
    planned = planned if planned is not None else set()
    if (team.id, match.id) in planned or has_lineup(db, team.id, match.id):
        return ALREADY_SAVED, None

    source_match = previous_match(db, match)
    if source_match is None:
        return FIRST_MATCH, None

    if (team.id, source_match.id) in planned:
        planned.add((team.id, match.id))
        return COPIED, source_match.id

    source = get_lineup(db, team.id, source_match.id)
    if source is None:
        return PREVIOUS_LINEUP_MISSING, source_match.id

    if apply:
        replace_lineup(
            db,
            team_id=team.id,
            league_id=match.league_id,
            match_id=match.id,
            lineup=source,
            is_auto_saved=True,
            auto_saved_from_match_id=source_match.id,
        )
    else:
        planned.add((team.id, match.id))
    return COPIED, source_match.id


def backfill_team(
    db: Session,
    team: FantasyTeam,
    target: LeagueMatch,
    now: Optional[datetime] = None,
) -> int:
    """Fill every locked, open gap in ``team``'s chain ahead of ``target``.

    Runs inside the caller's transaction; the caller owns commit/rollback.
    """
    copied = 0
    for match in matches_before(db, target):
        if match.is_completed or not is_locked(match, now):
            continue
        status, source_match_id = copy_forward(db, team, match)
        if status == COPIED:
            copied += 1
            logger.info(
                "auto_save_backfill team_id=%s match_id=%s from_match_id=%s",
                team.id,
                match.id,
                source_match_id,
            )
    return copied


def _pending_matches(db: Session, now: datetime) -> List[LeagueMatch]:
    rows = (
        db.execute(
            select(LeagueMatch)
            .where(LeagueMatch.is_completed.is_(False))
            .order_by(LeagueMatch.league_id, LeagueMatch.match_start, LeagueMatch.id)
        )
        .scalars()
        .all()
    )
    return [match for match in rows if is_locked(match, now)]


def propagate_all(
    db: Session,
    *,
    now: Optional[datetime] = None,
    apply: bool = True,
    league_id: Optional[int] = None,
) -> dict:
    """Backfill missing lineups for every locked, not yet completed match.

    Idempotent. Each (team, match) copy runs under the team row lock and is
    committed on its own so user saves are never held for a whole pass.
    """
    now = now or utcnow()
    summary = AutoSaveSummary(apply=apply)
    planned: Set[Tuple[int, int]] = set()

    matches = _pending_matches(db, now)
    if league_id is not None:
        matches = [match for match in matches if match.league_id == league_id]
    summary.leagues_checked = len({match.league_id for match in matches})

    for match in matches:
        summary.matches_processed += 1
        team_ids = (
            db.execute(
                select(FantasyTeam.id)
                .where(FantasyTeam.league_id == match.league_id)
                .order_by(FantasyTeam.id)
            )
            .scalars()
            .all()
        )
        for team_id in team_ids:
            summary.team_checks += 1
            team = lock_team(db, team_id) if apply else db.get(FantasyTeam, team_id)
            if team is None:
                continue
            try:
                status, source_match_id = copy_forward(
                    db, team, match, apply=apply, planned=planned
                )
                if apply:
                    db.commit()
            except Exception:
                db.rollback()
                raise

            if status == ALREADY_SAVED:
                continue
            if status == COPIED:
                summary.lineups_copied += 1
                logger.info(
                    "auto_save_copied league_id=%s match_id=%s team_id=%s from_match_id=%s",
                    match.league_id,
                    match.id,
                    team.id,
                    source_match_id,
                )
            else:
                summary.skipped += 1
                logger.info(
                    "auto_save_skip league_id=%s match_id=%s team_id=%s reason=%s",
                    match.league_id,
                    match.id,
                    team.id,
                    status,
                )
            summary.results.append(
                {
                    "league_id": match.league_id,
                    "match_id": match.id,
                    "team_id": team.id,
                    "status": status,
                    "source_match_id": source_match_id,
                }
            )

    if apply and (summary.lineups_copied or summary.skipped):
        log_action(
            db,
            category="playing_xi",
            action="auto_save",
            league_id=league_id,
            details={
                "matches_processed": summary.matches_processed,
                "lineups_copied": summary.lineups_copied,
                "skipped": summary.skipped,
            },
        )
    logger.info(
        "auto_save_done apply=%s leagues=%s matches=%s copied=%s skipped=%s",
        apply,
        summary.leagues_checked,
        summary.matches_processed,
        summary.lineups_copied,
        summary.skipped,
    )
    return summary.as_dict()
