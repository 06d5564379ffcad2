from typing import Dict, List, Optional

from pydantic import BaseModel

from fantasy_cricket.schemas.playing_xi import PlayerRefIn, PlayerRefOut


class AutoSaveResultItem(BaseModel):
    league_id: int
    match_id: int
    team_id: int
    status: str
    source_match_id: Optional[int] = None


class AutoSaveOut(BaseModel):
    apply: bool
    leagues_checked: int
    matches_processed: int
    team_checks: int
    lineups_copied: int
    skipped: int
    results: List[AutoSaveResultItem]


class AdminPointsIn(BaseModel):
    player_points: Optional[Dict[str, float]] = None
    mark_completed: bool = True


class TeamScoreOut(BaseModel):
    team_id: int
    match_id: int
    total_points: float
    captain_points: float
    vice_captain_points: float
    regular_points: float


class AdminPointsOut(BaseModel):
    ok: bool
    match_id: int
    league_id: int
    teams_scored: int
    completed: bool
    scores: List[TeamScoreOut]


class ReplacedLineupOut(BaseModel):
    match_id: int
    was_captain: bool
    was_vice_captain: bool


class ReplacementIn(BaseModel):
    out_player_id: str
    in_player: PlayerRefIn


class ReplacementOut(BaseModel):
    team_id: int
    out_player_id: str
    in_player_id: str
    squad: List[PlayerRefOut]
    affected_matches: List[ReplacedLineupOut] = []
