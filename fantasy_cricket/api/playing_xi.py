from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fantasy_cricket.db.session import get_db
from fantasy_cricket.models import FantasyLeague
from fantasy_cricket.schemas.playing_xi import (
    CopyPlayingXIIn,
    LeaderboardEntryOut,
    LockStatusOut,
    MatchesStatusOut,
    PlayingXIIn,
    PlayingXIOut,
    RejectionOut,
    SaveResultOut,
    TransferRecordOut,
    TransferStatsOut,
)
from fantasy_cricket.services.errors import NotFoundError
from fantasy_cricket.services.playing_xi import (
    copy_playing_xi,
    delete_playing_xi,
    get_lock_status,
    get_matches_status,
    get_playing_xi,
    get_transfer_stats,
    list_transfer_records,
    save_playing_xi,
)
from fantasy_cricket.services.scoring import league_leaderboard

router = APIRouter(prefix="/leagues", tags=["playing-xi"])

REJECTIONS = {
    400: {"model": RejectionOut},
    404: {"model": RejectionOut},
    409: {"model": RejectionOut},
    423: {"model": RejectionOut},
}


@router.get("/{league_id}/matches/{match_id}/lock-status", response_model=LockStatusOut)
def lock_status(league_id: int, match_id: int, db: Session = Depends(get_db)) -> LockStatusOut:
    return LockStatusOut(**get_lock_status(db, league_id=league_id, match_id=match_id))


@router.get("/{league_id}/teams/{team_id}/matches-status", response_model=MatchesStatusOut)
def matches_status(league_id: int, team_id: int, db: Session = Depends(get_db)) -> MatchesStatusOut:
    return MatchesStatusOut(**get_matches_status(db, league_id=league_id, team_id=team_id))


@router.get(
    "/{league_id}/teams/{team_id}/matches/{match_id}/playing-xi",
    response_model=PlayingXIOut,
    responses=REJECTIONS,
)
def read_playing_xi(
    league_id: int, team_id: int, match_id: int, db: Session = Depends(get_db)
) -> PlayingXIOut:
    return PlayingXIOut(
        **get_playing_xi(db, league_id=league_id, team_id=team_id, match_id=match_id)
    )


@router.put(
    "/{league_id}/teams/{team_id}/matches/{match_id}/playing-xi",
    response_model=SaveResultOut,
    responses=REJECTIONS,
)
def save(
    league_id: int,
    team_id: int,
    match_id: int,
    payload: PlayingXIIn,
    db: Session = Depends(get_db),
) -> SaveResultOut:
    result = save_playing_xi(
        db,
        league_id=league_id,
        team_id=team_id,
        match_id=match_id,
        players=[player.model_dump() for player in payload.players],
        captain_id=payload.captain_id,
        vice_captain_id=payload.vice_captain_id,
    )
    return SaveResultOut(**result.as_dict())


@router.post(
    "/{league_id}/teams/{team_id}/matches/{match_id}/playing-xi/copy",
    response_model=SaveResultOut,
    responses=REJECTIONS,
)
def copy(
    league_id: int,
    team_id: int,
    match_id: int,
    payload: CopyPlayingXIIn,
    db: Session = Depends(get_db),
) -> SaveResultOut:
    result = copy_playing_xi(
        db,
        league_id=league_id,
        team_id=team_id,
        match_id=match_id,
        from_match_id=payload.from_match_id,
    )
    return SaveResultOut(**result.as_dict())


@router.delete(
    "/{league_id}/teams/{team_id}/matches/{match_id}/playing-xi",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=REJECTIONS,
)
def remove(league_id: int, team_id: int, match_id: int, db: Session = Depends(get_db)) -> None:
    delete_playing_xi(db, league_id=league_id, team_id=team_id, match_id=match_id)


@router.get("/{league_id}/teams/{team_id}/transfer-stats", response_model=TransferStatsOut)
def transfer_stats(league_id: int, team_id: int, db: Session = Depends(get_db)) -> TransferStatsOut:
    return TransferStatsOut(**get_transfer_stats(db, league_id=league_id, team_id=team_id))


@router.get("/{league_id}/teams/{team_id}/transfers", response_model=List[TransferRecordOut])
def transfers(
    league_id: int,
    team_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> List[TransferRecordOut]:
    rows = list_transfer_records(db, league_id=league_id, team_id=team_id, limit=limit)
    return [TransferRecordOut.model_validate(row) for row in rows]


@router.get("/{league_id}/leaderboard", response_model=List[LeaderboardEntryOut])
def leaderboard(league_id: int, db: Session = Depends(get_db)) -> List[LeaderboardEntryOut]:
    if db.get(FantasyLeague, league_id) is None:
        raise NotFoundError("league_not_found", "League not found.")
    return [LeaderboardEntryOut(**row) for row in league_leaderboard(db, league_id)]
