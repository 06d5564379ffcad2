"""transfer audit trail, player points and team match scores

Revision ID: 0002_transfer_records_and_scores
Revises: 0001_init
Create Date: 2026-10-19 00:00:01.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_transfer_records_and_scores"
down_revision = "0001_init"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "transfer_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "team_id",
            sa.Integer(),
            sa.ForeignKey("fantasy_teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("fantasy_leagues.id"), nullable=False),
        sa.Column("match_id", sa.Integer(), sa.ForeignKey("league_matches.id"), nullable=False),
        sa.Column("transfer_type", sa.String(length=30), nullable=False),
        sa.Column("out_player_id", sa.String(length=64), nullable=True),
        sa.Column("out_player_name", sa.String(length=120), nullable=True),
        sa.Column("in_player_id", sa.String(length=64), nullable=True),
        sa.Column("in_player_name", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_transfer_records_team_id", "transfer_records", ["team_id"])
    op.create_table(
        "player_match_points",
        sa.Column("match_id", sa.Integer(), sa.ForeignKey("league_matches.id"), primary_key=True),
        sa.Column("player_id", sa.String(length=64), primary_key=True),
        sa.Column("points", sa.Numeric(7, 2), nullable=False, server_default="0"),
    )
    op.create_table(
        "team_match_scores",
        sa.Column(
            "team_id",
            sa.Integer(),
            sa.ForeignKey("fantasy_teams.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("match_id", sa.Integer(), sa.ForeignKey("league_matches.id"), primary_key=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("fantasy_leagues.id"), nullable=False),
        sa.Column("total_points", sa.Numeric(8, 2), nullable=False, server_default="0"),
        sa.Column("captain_points", sa.Numeric(8, 2), nullable=False, server_default="0"),
        sa.Column("vice_captain_points", sa.Numeric(8, 2), nullable=False, server_default="0"),
        sa.Column("regular_points", sa.Numeric(8, 2), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("team_match_scores")
    op.drop_table("player_match_points")
    op.drop_index("ix_transfer_records_team_id", table_name="transfer_records")
    op.drop_table("transfer_records")
