from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PlayerRefIn(BaseModel):
    player_id: str
    name: Optional[str] = None
    role: Optional[str] = None
    squad_tag: Optional[str] = None


class PlayerRefOut(BaseModel):
    player_id: str
    name: str
    role: Optional[str] = None
    squad_tag: Optional[str] = None


class PlayingXIIn(BaseModel):
    players: List[PlayerRefIn] = Field(min_length=1, max_length=30)
    captain_id: str
    vice_captain_id: str


class CopyPlayingXIIn(BaseModel):
    from_match_id: int


class LineupOut(BaseModel):
    match_id: Optional[int] = None
    players: List[PlayerRefOut]
    captain_id: str
    vice_captain_id: str
    is_auto_saved: bool = False


class MatchOut(BaseModel):
    id: int
    league_id: int
    match_description: Optional[str] = None
    match_start: datetime
    is_locked: bool
    is_completed: bool


class LockStatusOut(MatchOut):
    server_time: datetime


class MatchStatusOut(MatchOut):
    has_playing_xi: bool
    is_auto_saved: bool
    transfers_charged: int


class MatchesStatusOut(BaseModel):
    matches: List[MatchStatusOut]
    total: int
    pending: int
    locked: int
    completed: int


class MatchChargeOut(BaseModel):
    match_id: Optional[int] = None
    player_transfers: int
    captain_cost: int
    vice_captain_cost: int
    total: int


class TransferStatsOut(BaseModel):
    team_id: int
    transfer_limit: int
    transfers_used: int
    transfers_remaining: int
    transfers_locked: bool
    captain_change_used: bool
    vice_captain_change_used: bool
    captain_changes_remaining: int
    vice_captain_changes_remaining: int
    per_match: List[MatchChargeOut]


class PlayingXIOut(BaseModel):
    match: MatchOut
    lineup: Optional[LineupOut] = None
    role_summary: Optional[dict] = None
    is_locked: bool
    is_editable: bool
    can_edit: bool
    blocked_reason: Optional[str] = None
    previous_match_id: Optional[int] = None
    baseline_match_id: Optional[int] = None
    prefill: Optional[LineupOut] = None
    transfer_stats: TransferStatsOut


class PriceDetailsOut(BaseModel):
    player_transfers: int
    captain_cost: int
    vice_captain_cost: int
    total: int
    players_added: List[PlayerRefOut]
    players_removed: List[PlayerRefOut]


class SaveResultOut(BaseModel):
    accepted: bool
    match_id: int
    transfers_this_match: int
    transfers_used_total: int
    transfers_remaining: int
    transfer_limit: int
    captain_change_consumed: bool
    vice_captain_change_consumed: bool
    baseline_match_id: Optional[int] = None
    backfilled: int
    details: PriceDetailsOut


class RejectionOut(BaseModel):
    detail: str
    accepted: bool = False
    reason: str
    transfers_remaining: Optional[int] = None
    errors: List[str] = []


class TransferRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    match_id: int
    transfer_type: str
    out_player_id: Optional[str] = None
    out_player_name: Optional[str] = None
    in_player_id: Optional[str] = None
    in_player_name: Optional[str] = None
    created_at: datetime


class LeaderboardEntryOut(BaseModel):
    rank: int
    team_id: int
    team_name: str
    total_points: float
    matches_played: int
