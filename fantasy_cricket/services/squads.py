from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from fantasy_cricket.models import FantasyTeam, FantasyTeamPlayer
from fantasy_cricket.services.errors import LineupValidationError, NotFoundError
from fantasy_cricket.services.lineups import PlayerRef, apply_replacement_to_open_lineups


def _to_ref(row: FantasyTeamPlayer) -> PlayerRef:
    return PlayerRef(
        player_id=row.player_id,
        name=row.player_name,
        role=row.player_role,
        squad_tag=row.squad_name,
    )


def get_squad(db: Session, fantasy_team_id: int) -> Dict[str, PlayerRef]:
    """Active drafted roster of a team keyed by player id."""
    rows = (
        db.execute(
            select(FantasyTeamPlayer).where(
                FantasyTeamPlayer.fantasy_team_id == fantasy_team_id,
                FantasyTeamPlayer.is_active.is_(True),
            )
        )
        .scalars()
        .all()
    )
    return {row.player_id: _to_ref(row) for row in rows}


def replace_squad(db: Session, fantasy_team_id: int, players: Iterable[PlayerRef]) -> None:
    db.execute(delete(FantasyTeamPlayer).where(FantasyTeamPlayer.fantasy_team_id == fantasy_team_id))
    db.flush()
    for player in players:
        db.add(
            FantasyTeamPlayer(
                fantasy_team_id=fantasy_team_id,
                player_id=player.player_id,
                player_name=player.name,
                player_role=player.role,
                squad_name=player.squad_tag,
                is_active=True,
            )
        )
    db.commit()


def replace_squad_player(
    db: Session,
    fantasy_team_id: int,
    out_player_id: str,
    in_player: PlayerRef,
    now: Optional[datetime] = None,
) -> Tuple[List[PlayerRef], List[dict]]:
    """Swap an injured squad member for an approved replacement. Does not commit.

    The outgoing row is kept inactive so history can still name the player.
    Lineups of matches that have not locked yet get the replacement in the
    injured player's slot; the squad and the list of rewritten matches are
    returned.
    """
    team = db.get(FantasyTeam, fantasy_team_id)
    out_row = db.get(FantasyTeamPlayer, (fantasy_team_id, out_player_id))
    if team is None or out_row is None or not out_row.is_active:
        raise NotFoundError("squad_player_not_found", "Player is not an active member of the squad.")

    existing = db.get(FantasyTeamPlayer, (fantasy_team_id, in_player.player_id))
    if existing is not None and existing.is_active:
        raise LineupValidationError(["in_player_already_in_squad"], "Replacement is already in the squad.")

    elsewhere = db.execute(
        select(FantasyTeamPlayer.fantasy_team_id)
        .join(FantasyTeam, FantasyTeam.id == FantasyTeamPlayer.fantasy_team_id)
        .where(
            FantasyTeam.league_id == team.league_id,
            FantasyTeamPlayer.fantasy_team_id != fantasy_team_id,
            FantasyTeamPlayer.player_id == in_player.player_id,
            FantasyTeamPlayer.is_active.is_(True),
        )
        .limit(1)
    ).scalar_one_or_none()
    if elsewhere is not None:
        raise LineupValidationError(
            ["replacement_in_another_squad"],
            "Replacement player is already in another team in this league.",
        )

    out_row.is_active = False
    if existing is not None:
        existing.is_active = True
        existing.player_name = in_player.name
        existing.player_role = in_player.role
        existing.squad_name = in_player.squad_tag
        existing.replaced_player_id = out_player_id
    else:
        db.add(
            FantasyTeamPlayer(
                fantasy_team_id=fantasy_team_id,
                player_id=in_player.player_id,
                player_name=in_player.name,
                player_role=in_player.role,
                squad_name=in_player.squad_tag,
                is_active=True,
                replaced_player_id=out_player_id,
            )
        )
    db.flush()
    affected = apply_replacement_to_open_lineups(
        db, fantasy_team_id, out_player_id, in_player, now
    )
    squad = sorted(get_squad(db, fantasy_team_id).values(), key=lambda p: p.player_id)
    return squad, affected


def replacement_map(db: Session, fantasy_team_id: int) -> Dict[str, str]:
    """out player id -> in player id for every approved replacement of the team."""
    rows = db.execute(
        select(FantasyTeamPlayer.replaced_player_id, FantasyTeamPlayer.player_id).where(
            FantasyTeamPlayer.fantasy_team_id == fantasy_team_id,
            FantasyTeamPlayer.replaced_player_id.is_not(None),
        )
    ).all()
    return {out_id: in_id for out_id, in_id in rows}
