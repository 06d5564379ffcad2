from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)

from fantasy_cricket.core.config import get_settings
from fantasy_cricket.db.base import Base


class FantasyLeague(Base):
    __tablename__ = "fantasy_leagues"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    transfer_limit = Column(
        Integer,
        nullable=False,
        default=lambda: get_settings().DEFAULT_TRANSFER_LIMIT,
        server_default="10",
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class LeagueMatch(Base):
    __tablename__ = "league_matches"

    id = Column(Integer, primary_key=True)
    league_id = Column(Integer, ForeignKey("fantasy_leagues.id"), nullable=False, index=True)
    match_description = Column(String(200), nullable=True)
    match_start = Column(DateTime(timezone=True), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False, server_default="false")
    completed_at = Column(DateTime(timezone=True), nullable=True)


class FantasyTeam(Base):
    __tablename__ = "fantasy_teams"

    id = Column(Integer, primary_key=True)
    league_id = Column(Integer, ForeignKey("fantasy_leagues.id"), nullable=False, index=True)
    team_name = Column(String(80), nullable=False)
    owner_user_id = Column(Integer, nullable=True)
    transfers_used = Column(Integer, nullable=False, default=0, server_default="0")
    captain_change_used = Column(Boolean, nullable=False, default=False, server_default="false")
    vice_captain_change_used = Column(Boolean, nullable=False, default=False, server_default="false")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class FantasyTeamPlayer(Base):
    __tablename__ = "fantasy_team_players"

    fantasy_team_id = Column(
        Integer, ForeignKey("fantasy_teams.id", ondelete="CASCADE"), primary_key=True
    )
    player_id = Column(String(64), primary_key=True)
    player_name = Column(String(120), nullable=False)
    player_role = Column(String(60), nullable=True)
    squad_name = Column(String(80), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default="true")
    replaced_player_id = Column(String(64), nullable=True)
    added_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TeamPlayingXI(Base):
    __tablename__ = "team_playing_xi"

    id = Column(Integer, primary_key=True)
    team_id = Column(Integer, ForeignKey("fantasy_teams.id", ondelete="CASCADE"), nullable=False)
    league_id = Column(Integer, ForeignKey("fantasy_leagues.id"), nullable=False)
    match_id = Column(Integer, ForeignKey("league_matches.id"), nullable=False, index=True)
    captain_player_id = Column(String(64), nullable=False)
    vice_captain_player_id = Column(String(64), nullable=False)
    is_auto_saved = Column(Boolean, nullable=False, default=False, server_default="false")
    auto_saved_from_match_id = Column(Integer, ForeignKey("league_matches.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("team_id", "match_id"),)


class TeamPlayingXIPlayer(Base):
    __tablename__ = "team_playing_xi_players"

    lineup_id = Column(
        Integer, ForeignKey("team_playing_xi.id", ondelete="CASCADE"), primary_key=True
    )
    slot_index = Column(Integer, primary_key=True)
    player_id = Column(String(64), nullable=False)
    player_name = Column(String(120), nullable=False)
    player_role = Column(String(60), nullable=True)
    squad_name = Column(String(80), nullable=True)


class TransferRecord(Base):
    __tablename__ = "transfer_records"

    id = Column(Integer, primary_key=True)
    team_id = Column(Integer, ForeignKey("fantasy_teams.id", ondelete="CASCADE"), nullable=False, index=True)
    league_id = Column(Integer, ForeignKey("fantasy_leagues.id"), nullable=False)
    match_id = Column(Integer, ForeignKey("league_matches.id"), nullable=False)
    transfer_type = Column(String(30), nullable=False)
    out_player_id = Column(String(64), nullable=True)
    out_player_name = Column(String(120), nullable=True)
    in_player_id = Column(String(64), nullable=True)
    in_player_name = Column(String(120), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class PlayerMatchPoints(Base):
    __tablename__ = "player_match_points"

    match_id = Column(Integer, ForeignKey("league_matches.id"), primary_key=True)
    player_id = Column(String(64), primary_key=True)
    points = Column(Numeric(7, 2), nullable=False, default=0, server_default="0")


class TeamMatchScore(Base):
    __tablename__ = "team_match_scores"

    team_id = Column(Integer, ForeignKey("fantasy_teams.id", ondelete="CASCADE"), primary_key=True)
    match_id = Column(Integer, ForeignKey("league_matches.id"), primary_key=True)
    league_id = Column(Integer, ForeignKey("fantasy_leagues.id"), nullable=False)
    total_points = Column(Numeric(8, 2), nullable=False, default=0, server_default="0")
    captain_points = Column(Numeric(8, 2), nullable=False, default=0, server_default="0")
    vice_captain_points = Column(Numeric(8, 2), nullable=False, default=0, server_default="0")
    regular_points = Column(Numeric(8, 2), nullable=False, default=0, server_default="0")
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ActionLog(Base):
    __tablename__ = "action_logs"

    id = Column(Integer, primary_key=True)
    category = Column(String(30), nullable=False)
    action = Column(String(50), nullable=False)
    league_id = Column(Integer, ForeignKey("fantasy_leagues.id"), nullable=True)
    fantasy_team_id = Column(Integer, ForeignKey("fantasy_teams.id"), nullable=True)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
