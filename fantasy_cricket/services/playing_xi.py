from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fantasy_cricket.models import FantasyLeague, FantasyTeam, LeagueMatch, TransferRecord
from fantasy_cricket.services.action_log import log_action
from fantasy_cricket.services.auto_save import backfill_team
from fantasy_cricket.services.baseline import resolve_baseline_with_match
from fantasy_cricket.services.errors import (
    ConcurrentSaveError,
    LineupValidationError,
    LockedMatchError,
    NotFoundError,
    PlayingXIError,
    SequenceError,
)
from fantasy_cricket.services.lineups import (
    Lineup,
    PlayerRef,
    delete_lineup,
    get_lineup,
    lineup_chain,
    lineup_flags,
    lock_team,
    replace_lineup,
)
from fantasy_cricket.services.squads import get_squad, replacement_map
from fantasy_cricket.services.timeline import (
    as_utc,
    get_match,
    is_editable,
    is_locked,
    list_matches,
    previous_match,
    utcnow,
)
from fantasy_cricket.services.transfer_ledger import (
    CAPTAIN_CHANGE_ALLOWANCE,
    VICE_CAPTAIN_CHANGE_ALLOWANCE,
    LedgerState,
    PriceBreakdown,
    check_budget,
    price_change,
    replay_chain,
)
from fantasy_cricket.services.validation import describe, role_summary, validate_lineup

logger = logging.getLogger(__name__)

SUBSTITUTION = "substitution"
CAPTAIN_CHANGE = "captain_change"
VICE_CAPTAIN_CHANGE = "vice_captain_change"


@dataclass
class SaveResult:
    match_id: int
    transfers_this_match: int
    transfers_used_total: int
    transfers_remaining: int
    transfer_limit: int
    captain_change_consumed: bool
    vice_captain_change_consumed: bool
    baseline_match_id: Optional[int]
    backfilled: int
    price: PriceBreakdown

    def as_dict(self) -> dict:
        return {
            "accepted": True,
            "match_id": self.match_id,
            "transfers_this_match": self.transfers_this_match,
            "transfers_used_total": self.transfers_used_total,
            "transfers_remaining": self.transfers_remaining,
            "transfer_limit": self.transfer_limit,
            "captain_change_consumed": self.captain_change_consumed,
            "vice_captain_change_consumed": self.vice_captain_change_consumed,
            "baseline_match_id": self.baseline_match_id,
            "backfilled": self.backfilled,
            "details": self.price.as_dict(),
        }


def _load_context(
    db: Session, league_id: int, team_id: int, match_id: int
) -> Tuple[FantasyLeague, FantasyTeam, LeagueMatch]:
    league = db.get(FantasyLeague, league_id)
    if league is None:
        raise NotFoundError("league_not_found", "League not found.")
    match = get_match(db, league_id, match_id)
    if match is None:
        raise NotFoundError("match_not_found", "Match not found.")
    team = db.get(FantasyTeam, team_id)
    if team is None or team.league_id != league_id:
        raise NotFoundError("team_not_found", "Team not found.")
    return league, team, match


def _check_sequence(
    db: Session, match: LeagueMatch, now: datetime
) -> Optional[LeagueMatch]:
    """Gate a mutation on ``match``: it must be open and its predecessor locked."""
    if match.is_completed:
        raise LockedMatchError("match_completed", "Match is already completed.")
    if is_locked(match, now):
        raise LockedMatchError(
            "match_locked", "Match deadline has passed. Lineup is locked."
        )
    previous = previous_match(db, match)
    if previous is not None and not is_locked(previous, now):
        raise SequenceError(
            "previous_match_not_locked",
            "Previous match must be locked first. Wait until "
            f"{as_utc(previous.match_start).isoformat()}.",
        )
    return previous


def _build_proposal(
    match_id: int,
    players: Iterable[PlayerRef | dict],
    captain_id: str,
    vice_captain_id: str,
    squad: Dict[str, PlayerRef],
) -> Lineup:
    refs: List[PlayerRef] = []
    for raw in players:
        if isinstance(raw, dict):
            raw = PlayerRef(
                player_id=str(raw["player_id"]),
                name=raw.get("name") or str(raw["player_id"]),
                role=raw.get("role"),
                squad_tag=raw.get("squad_tag"),
            )
        # squad rows are authoritative for name/role/squad tag
        refs.append(squad.get(raw.player_id, raw))
    return Lineup(
        players=tuple(refs),
        captain_id=str(captain_id),
        vice_captain_id=str(vice_captain_id),
        match_id=match_id,
    )


def _record_transfers(
    db: Session,
    team: FantasyTeam,
    match: LeagueMatch,
    baseline: Optional[Lineup],
    proposed: Lineup,
    price: PriceBreakdown,
) -> None:
    if baseline is None or price.total == 0:
        return
    names = {p.player_id: p.name for p in (*baseline.players, *proposed.players)}

    def _add(kind: str, out_id: Optional[str], in_id: Optional[str]) -> None:
        db.add(
            TransferRecord(
                team_id=team.id,
                league_id=team.league_id,
                match_id=match.id,
                transfer_type=kind,
                out_player_id=out_id,
                out_player_name=names.get(out_id) if out_id else None,
                in_player_id=in_id,
                in_player_name=names.get(in_id) if in_id else None,
            )
        )

    for removed, added in zip(price.players_removed, price.players_added):
        _add(SUBSTITUTION, removed.player_id, added.player_id)
    if price.captain_cost:
        _add(CAPTAIN_CHANGE, baseline.captain_id, proposed.captain_id)
    if price.vice_captain_cost:
        _add(VICE_CAPTAIN_CHANGE, baseline.vice_captain_id, proposed.vice_captain_id)


def _refresh_team_counters(team: FantasyTeam, state: LedgerState) -> None:
    # cache only; acceptance always replays the chain
    team.transfers_used = state.transfers_used
    team.captain_change_used = state.captain_change_used
    team.vice_captain_change_used = state.vice_captain_change_used


def _replay(
    db: Session,
    team: FantasyTeam,
    league: FantasyLeague,
    *,
    before: Optional[LeagueMatch] = None,
) -> LedgerState:
    return replay_chain(
        lineup_chain(db, team.id, league.id, before=before),
        league.transfer_limit,
        replacement_map(db, team.id),
    )


def _fill_remaining(db: Session, exc: PlayingXIError, league_id: int, team_id: int) -> None:
    """Attach the committed budget to a rejection. Runs after rollback."""
    if exc.transfers_remaining is not None:
        return
    league = db.get(FantasyLeague, league_id)
    team = db.get(FantasyTeam, team_id)
    if league is None or team is None or team.league_id != league.id:
        return
    state = _replay(db, team, league)
    exc.transfers_remaining = state.transfers_remaining
    exc.transfers_used = state.transfers_used


def save_playing_xi(
    db: Session,
    *,
    league_id: int,
    team_id: int,
    match_id: int,
    players: Sequence[PlayerRef | dict],
    captain_id: str,
    vice_captain_id: str,
    now: Optional[datetime] = None,
) -> SaveResult:
    """Validate, price and persist a Playing XI in one transaction.

    Every rejection is raised before anything is committed and the session
    is rolled back, so a failed save leaves lineups and counters untouched.
    """
    now = now or utcnow()
    try:
        league, team, match = _load_context(db, league_id, team_id, match_id)
        lock_team(db, team.id)
        previous = _check_sequence(db, match, now)

        backfilled = backfill_team(db, team, match, now)
        baseline, baseline_match = resolve_baseline_with_match(db, team.id, match, now)
        if previous is not None and baseline is None:
            raise SequenceError(
                "previous_match_has_no_lineup",
                "Cannot save this match. Set up the previous match first.",
            )

        squad = get_squad(db, team.id)
        proposed = _build_proposal(match.id, players, captain_id, vice_captain_id, squad)
        errors = validate_lineup(proposed, squad)
        if errors:
            raise LineupValidationError(errors, describe(errors[0]))

        replacements = replacement_map(db, team.id)
        price = price_change(baseline, proposed, replacements)
        state = replay_chain(
            lineup_chain(db, team.id, league.id, before=match),
            league.transfer_limit,
            replacements,
        )
        check_budget(state, price)

        replace_lineup(
            db,
            team_id=team.id,
            league_id=league.id,
            match_id=match.id,
            lineup=proposed,
        )
        _record_transfers(db, team, match, baseline, proposed, price)
        state.apply(match.id, price)
        _refresh_team_counters(team, state)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(
            "playing_xi_save_conflict league_id=%s team_id=%s match_id=%s",
            league_id,
            team_id,
            match_id,
        )
        conflict = ConcurrentSaveError(
            "concurrent_save", "Another save for this match went through first. Reload and retry."
        )
        _fill_remaining(db, conflict, league_id, team_id)
        raise conflict from exc
    except PlayingXIError as exc:
        db.rollback()
        _fill_remaining(db, exc, league_id, team_id)
        raise
    except Exception:
        db.rollback()
        raise

    logger.info(
        "playing_xi_saved league_id=%s team_id=%s match_id=%s cost=%s used=%s limit=%s",
        league_id,
        team_id,
        match_id,
        price.total,
        state.transfers_used,
        state.transfer_limit,
    )
    return SaveResult(
        match_id=match_id,
        transfers_this_match=price.total,
        transfers_used_total=state.transfers_used,
        transfers_remaining=state.transfers_remaining,
        transfer_limit=state.transfer_limit,
        captain_change_consumed=bool(price.captain_cost),
        vice_captain_change_consumed=bool(price.vice_captain_cost),
        baseline_match_id=baseline_match.id if baseline_match is not None else None,
        backfilled=backfilled,
        price=price,
    )


def copy_playing_xi(
    db: Session,
    *,
    league_id: int,
    team_id: int,
    match_id: int,
    from_match_id: int,
    now: Optional[datetime] = None,
) -> SaveResult:
    """Save a stored lineup of another match into ``match_id``, priced as a save."""
    try:
        if get_match(db, league_id, from_match_id) is None:
            raise NotFoundError("match_not_found", "Source match not found.")
        source = get_lineup(db, team_id, from_match_id)
        if source is None:
            raise NotFoundError("lineup_not_found", "No Playing XI found in source match.")
    except PlayingXIError as exc:
        db.rollback()
        _fill_remaining(db, exc, league_id, team_id)
        raise
    return save_playing_xi(
        db,
        league_id=league_id,
        team_id=team_id,
        match_id=match_id,
        players=source.players,
        captain_id=source.captain_id,
        vice_captain_id=source.vice_captain_id,
        now=now,
    )


def delete_playing_xi(
    db: Session,
    *,
    league_id: int,
    team_id: int,
    match_id: int,
    now: Optional[datetime] = None,
) -> None:
    now = now or utcnow()
    try:
        league, team, match = _load_context(db, league_id, team_id, match_id)
        lock_team(db, team.id)
        if match.is_completed:
            raise LockedMatchError("match_completed", "Match is already completed.")
        if is_locked(match, now):
            raise LockedMatchError(
                "match_locked", "Cannot delete Playing XI - match has already started."
            )
        if not delete_lineup(db, team.id, match.id):
            raise NotFoundError("lineup_not_found", "No Playing XI found for this match.")
        state = _replay(db, team, league)
        _refresh_team_counters(team, state)
        log_action(
            db,
            category="playing_xi",
            action="delete",
            league_id=league.id,
            fantasy_team_id=team.id,
            details={"match_id": match.id},
            commit=False,
        )
        db.commit()
    except PlayingXIError as exc:
        db.rollback()
        _fill_remaining(db, exc, league_id, team_id)
        raise
    except Exception:
        db.rollback()
        raise


def get_transfer_stats(db: Session, *, league_id: int, team_id: int) -> dict:
    league = db.get(FantasyLeague, league_id)
    if league is None:
        raise NotFoundError("league_not_found", "League not found.")
    team = db.get(FantasyTeam, team_id)
    if team is None or team.league_id != league_id:
        raise NotFoundError("team_not_found", "Team not found.")
    state = _replay(db, team, league)
    return {
        "team_id": team.id,
        "transfer_limit": state.transfer_limit,
        "transfers_used": state.transfers_used,
        "transfers_remaining": state.transfers_remaining,
        "transfers_locked": state.transfers_remaining <= 0,
        "captain_change_used": state.captain_change_used,
        "vice_captain_change_used": state.vice_captain_change_used,
        "captain_changes_remaining": max(0, CAPTAIN_CHANGE_ALLOWANCE - state.captain_changes),
        "vice_captain_changes_remaining": max(
            0, VICE_CAPTAIN_CHANGE_ALLOWANCE - state.vice_captain_changes
        ),
        "per_match": state.per_match,
    }


def _blocked_reason(
    db: Session, team_id: int, match: LeagueMatch, now: datetime
) -> Tuple[Optional[str], Optional[LeagueMatch], Optional[Lineup], Optional[LeagueMatch]]:
    previous = previous_match(db, match)
    if match.is_completed:
        return "match_completed", previous, None, None
    if is_locked(match, now):
        return "match_locked", previous, None, None
    if previous is not None and not is_locked(previous, now):
        return "previous_match_not_locked", previous, None, None
    baseline, baseline_match = resolve_baseline_with_match(db, team_id, match, now)
    if previous is not None and baseline is None:
        return "previous_match_has_no_lineup", previous, None, None
    return None, previous, baseline, baseline_match


def get_playing_xi(
    db: Session,
    *,
    league_id: int,
    team_id: int,
    match_id: int,
    now: Optional[datetime] = None,
) -> dict:
    """Read-only view of (team, match) with lock flags and a prefill suggestion."""
    now = now or utcnow()
    league, team, match = _load_context(db, league_id, team_id, match_id)
    lineup = get_lineup(db, team.id, match.id)
    reason, previous, baseline, baseline_match = _blocked_reason(db, team.id, match, now)
    prefill = baseline if (lineup is None and reason is None) else None
    return {
        "match": _match_dict(match, now),
        "lineup": lineup.as_dict() if lineup is not None else None,
        "role_summary": role_summary(lineup.players) if lineup is not None else None,
        "is_locked": is_locked(match, now),
        "is_editable": is_editable(match, now),
        "can_edit": reason is None,
        "blocked_reason": reason,
        "previous_match_id": previous.id if previous is not None else None,
        "baseline_match_id": baseline_match.id if baseline_match is not None else None,
        "prefill": prefill.as_dict() if prefill is not None else None,
        "transfer_stats": get_transfer_stats(db, league_id=league.id, team_id=team.id),
    }


def _match_dict(match: LeagueMatch, now: datetime) -> dict:
    return {
        "id": match.id,
        "league_id": match.league_id,
        "match_description": match.match_description,
        "match_start": as_utc(match.match_start),
        "is_locked": is_locked(match, now),
        "is_completed": bool(match.is_completed),
    }


def get_lock_status(
    db: Session, *, league_id: int, match_id: int, now: Optional[datetime] = None
) -> dict:
    now = now or utcnow()
    match = get_match(db, league_id, match_id)
    if match is None:
        raise NotFoundError("match_not_found", "Match not found.")
    data = _match_dict(match, now)
    data["server_time"] = as_utc(now)
    return data


def get_matches_status(
    db: Session, *, league_id: int, team_id: int, now: Optional[datetime] = None
) -> dict:
    now = now or utcnow()
    league = db.get(FantasyLeague, league_id)
    if league is None:
        raise NotFoundError("league_not_found", "League not found.")
    team = db.get(FantasyTeam, team_id)
    if team is None or team.league_id != league_id:
        raise NotFoundError("team_not_found", "Team not found.")

    flags = lineup_flags(db, team.id, league.id)
    state = _replay(db, team, league)
    charged = {item["match_id"]: item["total"] for item in state.per_match}

    matches = []
    for match in list_matches(db, league.id):
        item = _match_dict(match, now)
        item["has_playing_xi"] = match.id in flags
        item["is_auto_saved"] = flags.get(match.id, False)
        item["transfers_charged"] = charged.get(match.id, 0)
        matches.append(item)

    return {
        "matches": matches,
        "total": len(matches),
        "pending": sum(1 for m in matches if not m["has_playing_xi"] and not m["is_locked"]),
        "locked": sum(1 for m in matches if m["is_locked"]),
        "completed": sum(1 for m in matches if m["is_completed"]),
    }


def list_transfer_records(
    db: Session, *, league_id: int, team_id: int, limit: int = 100
) -> List[TransferRecord]:
    return (
        db.execute(
            select(TransferRecord)
            .where(TransferRecord.team_id == team_id, TransferRecord.league_id == league_id)
            .order_by(TransferRecord.created_at.desc(), TransferRecord.id.desc())
            .limit(limit)
        )
        .scalars()
        .all()
    )
