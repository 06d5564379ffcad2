"""leagues, matches, teams, squads and playing xi

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "fantasy_leagues",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("transfer_limit", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        "league_matches",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("fantasy_leagues.id"), nullable=False),
        sa.Column("match_description", sa.String(length=200), nullable=True),
        sa.Column("match_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_league_matches_league_id", "league_matches", ["league_id"])
    op.create_table(
        "fantasy_teams",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("fantasy_leagues.id"), nullable=False),
        sa.Column("team_name", sa.String(length=80), nullable=False),
        sa.Column("owner_user_id", sa.Integer(), nullable=True),
        sa.Column("transfers_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("captain_change_used", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("vice_captain_change_used", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_fantasy_teams_league_id", "fantasy_teams", ["league_id"])
    op.create_table(
        "fantasy_team_players",
        sa.Column(
            "fantasy_team_id",
            sa.Integer(),
            sa.ForeignKey("fantasy_teams.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("player_id", sa.String(length=64), primary_key=True),
        sa.Column("player_name", sa.String(length=120), nullable=False),
        sa.Column("player_role", sa.String(length=60), nullable=True),
        sa.Column("squad_name", sa.String(length=80), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("replaced_player_id", sa.String(length=64), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        "team_playing_xi",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "team_id",
            sa.Integer(),
            sa.ForeignKey("fantasy_teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("fantasy_leagues.id"), nullable=False),
        sa.Column("match_id", sa.Integer(), sa.ForeignKey("league_matches.id"), nullable=False),
        sa.Column("captain_player_id", sa.String(length=64), nullable=False),
        sa.Column("vice_captain_player_id", sa.String(length=64), nullable=False),
        sa.Column("is_auto_saved", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "auto_saved_from_match_id",
            sa.Integer(),
            sa.ForeignKey("league_matches.id"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("team_id", "match_id"),
    )
    op.create_index("ix_team_playing_xi_match_id", "team_playing_xi", ["match_id"])
    op.create_table(
        "team_playing_xi_players",
        sa.Column(
            "lineup_id",
            sa.Integer(),
            sa.ForeignKey("team_playing_xi.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("slot_index", sa.Integer(), primary_key=True),
        sa.Column("player_id", sa.String(length=64), nullable=False),
        sa.Column("player_name", sa.String(length=120), nullable=False),
        sa.Column("player_role", sa.String(length=60), nullable=True),
        sa.Column("squad_name", sa.String(length=80), nullable=True),
    )
    op.create_table(
        "action_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("category", sa.String(length=30), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("fantasy_leagues.id"), nullable=True),
        sa.Column("fantasy_team_id", sa.Integer(), sa.ForeignKey("fantasy_teams.id"), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("action_logs")
    op.drop_table("team_playing_xi_players")
    op.drop_index("ix_team_playing_xi_match_id", table_name="team_playing_xi")
    op.drop_table("team_playing_xi")
    op.drop_table("fantasy_team_players")
    op.drop_index("ix_fantasy_teams_league_id", table_name="fantasy_teams")
    op.drop_table("fantasy_teams")
    op.drop_index("ix_league_matches_league_id", table_name="league_matches")
    op.drop_table("league_matches")
    op.drop_table("fantasy_leagues")
