from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from fantasy_cricket.models import FantasyTeam, LeagueMatch, TeamPlayingXI, TeamPlayingXIPlayer
from fantasy_cricket.services.timeline import as_utc, is_locked


@dataclass(frozen=True)
class PlayerRef:
    player_id: str
    name: str
    role: Optional[str] = None
    squad_tag: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "role": self.role,
            "squad_tag": self.squad_tag,
        }


@dataclass(frozen=True)
class Lineup:
    players: Tuple[PlayerRef, ...]
    captain_id: str
    vice_captain_id: str
    match_id: Optional[int] = None
    is_auto_saved: bool = False

    @property
    def player_ids(self) -> FrozenSet[str]:
        return frozenset(p.player_id for p in self.players)

    def as_dict(self) -> dict:
        return {
            "match_id": self.match_id,
            "players": [p.as_dict() for p in self.players],
            "captain_id": self.captain_id,
            "vice_captain_id": self.vice_captain_id,
            "is_auto_saved": self.is_auto_saved,
        }

    def same_selection(self, other: "Lineup") -> bool:
        return (
            [p.player_id for p in self.players] == [p.player_id for p in other.players]
            and self.captain_id == other.captain_id
            and self.vice_captain_id == other.vice_captain_id
        )


def _load_slots(db: Session, lineup_id: int) -> List[TeamPlayingXIPlayer]:
    return (
        db.execute(
            select(TeamPlayingXIPlayer)
            .where(TeamPlayingXIPlayer.lineup_id == lineup_id)
            .order_by(TeamPlayingXIPlayer.slot_index)
        )
        .scalars()
        .all()
    )


def _to_lineup(row: TeamPlayingXI, slots: Iterable[TeamPlayingXIPlayer]) -> Lineup:
    return Lineup(
        players=tuple(
            PlayerRef(
                player_id=slot.player_id,
                name=slot.player_name,
                role=slot.player_role,
                squad_tag=slot.squad_name,
            )
            for slot in slots
        ),
        captain_id=row.captain_player_id,
        vice_captain_id=row.vice_captain_player_id,
        match_id=row.match_id,
        is_auto_saved=bool(row.is_auto_saved),
    )


def get_lineup_row(db: Session, team_id: int, match_id: int) -> Optional[TeamPlayingXI]:
    return db.execute(
        select(TeamPlayingXI).where(
            TeamPlayingXI.team_id == team_id,
            TeamPlayingXI.match_id == match_id,
        )
    ).scalar_one_or_none()


def get_lineup(db: Session, team_id: int, match_id: int) -> Optional[Lineup]:
    row = get_lineup_row(db, team_id, match_id)
    if row is None:
        return None
    return _to_lineup(row, _load_slots(db, row.id))


def has_lineup(db: Session, team_id: int, match_id: int) -> bool:
    return (
        db.execute(
            select(TeamPlayingXI.id).where(
                TeamPlayingXI.team_id == team_id,
                TeamPlayingXI.match_id == match_id,
            )
        ).scalar_one_or_none()
        is not None
    )


def lineup_chain(
    db: Session,
    team_id: int,
    league_id: int,
    *,
    before: Optional[LeagueMatch] = None,
) -> List[Lineup]:
    """Stored lineups of a team in timeline order.

    With ``before`` only lineups of matches strictly ahead of it in the
    timeline are returned.
    """
    stmt = (
        select(TeamPlayingXI, LeagueMatch)
        .join(LeagueMatch, LeagueMatch.id == TeamPlayingXI.match_id)
        .where(TeamPlayingXI.team_id == team_id, LeagueMatch.league_id == league_id)
        .order_by(LeagueMatch.match_start, LeagueMatch.id)
    )
    rows = db.execute(stmt).all()
    if before is not None:
        cut = _ordering_key(before)
        rows = [(row, match) for row, match in rows if _ordering_key(match) < cut]
    return [_to_lineup(row, _load_slots(db, row.id)) for row, _ in rows]


def lineup_flags(db: Session, team_id: int, league_id: int) -> Dict[int, bool]:
    """match_id -> is_auto_saved for every stored lineup of the team."""
    rows = db.execute(
        select(TeamPlayingXI.match_id, TeamPlayingXI.is_auto_saved).where(
            TeamPlayingXI.team_id == team_id,
            TeamPlayingXI.league_id == league_id,
        )
    ).all()
    return {int(match_id): bool(auto) for match_id, auto in rows}


def _ordering_key(match: LeagueMatch) -> tuple:
    return (as_utc(match.match_start), match.id)


def replace_lineup(
    db: Session,
    *,
    team_id: int,
    league_id: int,
    match_id: int,
    lineup: Lineup,
    is_auto_saved: bool = False,
    auto_saved_from_match_id: Optional[int] = None,
) -> TeamPlayingXI:
    """Delete-then-insert the lineup of (team, match). Does not commit."""
    delete_lineup(db, team_id, match_id)
    row = TeamPlayingXI(
        team_id=team_id,
        league_id=league_id,
        match_id=match_id,
        captain_player_id=lineup.captain_id,
        vice_captain_player_id=lineup.vice_captain_id,
        is_auto_saved=is_auto_saved,
        auto_saved_from_match_id=auto_saved_from_match_id,
    )
    db.add(row)
    db.flush()
    for slot_index, player in enumerate(lineup.players):
        db.add(
            TeamPlayingXIPlayer(
                lineup_id=row.id,
                slot_index=slot_index,
                player_id=player.player_id,
                player_name=player.name,
                player_role=player.role,
                squad_name=player.squad_tag,
            )
        )
    db.flush()
    return row


def delete_lineup(db: Session, team_id: int, match_id: int) -> bool:
    """Remove the lineup of (team, match) if present. Does not commit."""
    row = get_lineup_row(db, team_id, match_id)
    if row is None:
        return False
    db.execute(delete(TeamPlayingXIPlayer).where(TeamPlayingXIPlayer.lineup_id == row.id))
    db.delete(row)
    db.flush()
    return True


def lock_team(db: Session, team_id: int) -> Optional[FantasyTeam]:
    """Row-lock the team for the rest of the transaction (FOR UPDATE)."""
    return db.execute(
        select(FantasyTeam).where(FantasyTeam.id == team_id).with_for_update()
    ).scalar_one_or_none()


def apply_replacement_to_open_lineups(
    db: Session,
    team_id: int,
    out_player_id: str,
    in_player: PlayerRef,
    now: Optional[datetime] = None,
) -> List[dict]:
    """Put ``in_player`` in place of ``out_player_id`` in every open lineup.

    Locked and completed matches keep what was played. Captain and
    vice-captain slots follow the player. Does not commit.
    """
    rows = db.execute(
        select(TeamPlayingXI, LeagueMatch)
        .join(LeagueMatch, LeagueMatch.id == TeamPlayingXI.match_id)
        .where(TeamPlayingXI.team_id == team_id, LeagueMatch.is_completed.is_(False))
        .order_by(LeagueMatch.match_start, LeagueMatch.id)
    ).all()

    affected: List[dict] = []
    for row, match in rows:
        if is_locked(match, now):
            continue
        slots = [slot for slot in _load_slots(db, row.id) if slot.player_id == out_player_id]
        if not slots:
            continue
        for slot in slots:
            slot.player_id = in_player.player_id
            slot.player_name = in_player.name
            slot.player_role = in_player.role
            slot.squad_name = in_player.squad_tag
        was_captain = row.captain_player_id == out_player_id
        was_vice_captain = row.vice_captain_player_id == out_player_id
        if was_captain:
            row.captain_player_id = in_player.player_id
        if was_vice_captain:
            row.vice_captain_player_id = in_player.player_id
        affected.append(
            {
                "match_id": match.id,
                "was_captain": was_captain,
                "was_vice_captain": was_vice_captain,
            }
        )
    db.flush()
    return affected
