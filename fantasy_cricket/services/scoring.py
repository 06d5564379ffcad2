from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fantasy_cricket.models import (
    FantasyTeam,
    LeagueMatch,
    PlayerMatchPoints,
    TeamMatchScore,
    TeamPlayingXI,
)
from fantasy_cricket.services.action_log import log_action
from fantasy_cricket.services.errors import NotFoundError
from fantasy_cricket.services.lineups import get_lineup

logger = logging.getLogger(__name__)

CAPTAIN_MULTIPLIER = 2
VICE_CAPTAIN_MULTIPLIER = 1.5

PointsProvider = Callable[[str, int], float]


def final_points(base_points: float, *, is_captain: bool = False, is_vice_captain: bool = False) -> float:
    if is_captain:
        return base_points * CAPTAIN_MULTIPLIER
    if is_vice_captain:
        return math.floor(base_points * VICE_CAPTAIN_MULTIPLIER)
    return base_points


def db_points_provider(db: Session, match_id: int) -> PointsProvider:
    """Points provider backed by ``player_match_points`` for a single match."""
    rows = db.execute(
        select(PlayerMatchPoints.player_id, PlayerMatchPoints.points).where(
            PlayerMatchPoints.match_id == match_id
        )
    ).all()
    points_map: Dict[str, float] = {str(pid): float(points or 0) for pid, points in rows}

    def _provider(player_id: str, _match_id: int) -> float:
        return points_map.get(str(player_id), 0.0)

    return _provider


def calc_team_match_points(
    db: Session, team_id: int, match_id: int, get_player_points: PointsProvider
) -> Optional[dict]:
    lineup = get_lineup(db, team_id, match_id)
    if lineup is None:
        return None
    captain_points = 0.0
    vice_points = 0.0
    regular_points = 0.0
    for player in lineup.players:
        base = float(get_player_points(player.player_id, match_id))
        if player.player_id == lineup.captain_id:
            captain_points = final_points(base, is_captain=True)
        elif player.player_id == lineup.vice_captain_id:
            vice_points = final_points(base, is_vice_captain=True)
        else:
            regular_points += base
    return {
        "team_id": team_id,
        "match_id": match_id,
        "total_points": captain_points + vice_points + regular_points,
        "captain_points": captain_points,
        "vice_captain_points": vice_points,
        "regular_points": regular_points,
    }


def calculate_match_points(
    db: Session,
    match_id: int,
    get_player_points: Optional[PointsProvider] = None,
    *,
    mark_completed: bool = True,
) -> dict:
    """Score every stored lineup of a match and upsert ``team_match_scores``."""
    match = db.get(LeagueMatch, match_id)
    if match is None:
        raise NotFoundError("match_not_found", "Match not found.")
    provider = get_player_points or db_points_provider(db, match_id)

    team_ids = (
        db.execute(
            select(TeamPlayingXI.team_id)
            .where(TeamPlayingXI.match_id == match_id)
            .order_by(TeamPlayingXI.team_id)
        )
        .scalars()
        .all()
    )
    scores: List[dict] = []
    try:
        for team_id in team_ids:
            result = calc_team_match_points(db, team_id, match_id, provider)
            if result is None:
                continue
            row = db.get(TeamMatchScore, (team_id, match_id))
            if row is None:
                row = TeamMatchScore(team_id=team_id, match_id=match_id, league_id=match.league_id)
                db.add(row)
            row.total_points = result["total_points"]
            row.captain_points = result["captain_points"]
            row.vice_captain_points = result["vice_captain_points"]
            row.regular_points = result["regular_points"]
            scores.append(result)

        if mark_completed and not match.is_completed:
            match.is_completed = True
            match.completed_at = datetime.now(timezone.utc)
        log_action(
            db,
            category="points",
            action="calculate_match",
            league_id=match.league_id,
            details={"match_id": match_id, "teams_scored": len(scores)},
            commit=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("match_points_calculated match_id=%s teams=%s", match_id, len(scores))
    return {
        "ok": True,
        "match_id": match_id,
        "league_id": match.league_id,
        "teams_scored": len(scores),
        "completed": bool(match.is_completed),
        "scores": scores,
    }


def league_leaderboard(db: Session, league_id: int) -> List[dict]:
    rows = db.execute(
        select(
            FantasyTeam.id,
            FantasyTeam.team_name,
            func.coalesce(func.sum(TeamMatchScore.total_points), 0),
            func.count(TeamMatchScore.match_id),
        )
        .outerjoin(TeamMatchScore, TeamMatchScore.team_id == FantasyTeam.id)
        .where(FantasyTeam.league_id == league_id)
        .group_by(FantasyTeam.id, FantasyTeam.team_name)
    ).all()
    ordered = sorted(rows, key=lambda row: (-float(row[2] or 0), row[0]))
    board = []
    for index, (team_id, team_name, total, played) in enumerate(ordered, start=1):
        board.append(
            {
                "rank": index,
                "team_id": team_id,
                "team_name": team_name,
                "total_points": float(total or 0),
                "matches_played": int(played or 0),
            }
        )
    return board
