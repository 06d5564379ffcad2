from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fantasy_cricket.api.deps import require_admin
from fantasy_cricket.db.session import get_db
from fantasy_cricket.schemas.admin import (
    AdminPointsIn,
    AdminPointsOut,
    AutoSaveOut,
    ReplacementIn,
    ReplacementOut,
)
from fantasy_cricket.services.action_log import log_action
from fantasy_cricket.services.auto_save import propagate_all
from fantasy_cricket.services.errors import NotFoundError
from fantasy_cricket.services.lineups import PlayerRef, lock_team
from fantasy_cricket.services.scoring import calculate_match_points
from fantasy_cricket.services.squads import replace_squad_player

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _static_provider(player_points: dict[str, float]):
    points_map = {str(k): float(v) for k, v in player_points.items()}

    def _provider(player_id: str, _match_id: int) -> float:
        return points_map.get(str(player_id), 0.0)

    return _provider


@router.post("/playing-xi/auto-save", response_model=AutoSaveOut)
def run_auto_save(
    dry_run: bool = Query(default=False),
    league_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
) -> AutoSaveOut:
    return AutoSaveOut(**propagate_all(db, apply=not dry_run, league_id=league_id))


@router.post("/matches/{match_id}/calculate-points", response_model=AdminPointsOut)
def calculate_points(
    match_id: int,
    payload: AdminPointsIn | None = None,
    db: Session = Depends(get_db),
) -> AdminPointsOut:
    payload = payload or AdminPointsIn()
    provider = (
        _static_provider(payload.player_points) if payload.player_points is not None else None
    )
    return AdminPointsOut(
        **calculate_match_points(db, match_id, provider, mark_completed=payload.mark_completed)
    )


@router.post("/teams/{team_id}/replacements", response_model=ReplacementOut)
def approve_replacement(
    team_id: int, payload: ReplacementIn, db: Session = Depends(get_db)
) -> ReplacementOut:
    in_player = PlayerRef(
        player_id=payload.in_player.player_id,
        name=payload.in_player.name or payload.in_player.player_id,
        role=payload.in_player.role,
        squad_tag=payload.in_player.squad_tag,
    )
    try:
        team = lock_team(db, team_id)
        if team is None:
            raise NotFoundError("team_not_found", "Team not found.")
        squad, affected = replace_squad_player(db, team.id, payload.out_player_id, in_player)
        log_action(
            db,
            category="squad",
            action="replacement",
            league_id=team.league_id,
            fantasy_team_id=team.id,
            details={
                "out_player_id": payload.out_player_id,
                "in_player_id": in_player.player_id,
                "affected_matches": [item["match_id"] for item in affected],
            },
            commit=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return ReplacementOut(
        team_id=team_id,
        out_player_id=payload.out_player_id,
        in_player_id=in_player.player_id,
        squad=[p.as_dict() for p in squad],
        affected_matches=affected,
    )
