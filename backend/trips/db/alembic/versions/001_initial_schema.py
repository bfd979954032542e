"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-17

Creates:
- trip (owner-scoped trip documents, unique share token)
- activity (activity documents, cascade-deleted with their trip)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

Document = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create all tables."""
    # trip table
    op.create_table(
        "trip",
        sa.Column("trip_id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("is_shared", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("share_token", sa.Text(), nullable=True),
        sa.Column("document", Document, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("share_token", name="uq_trip_share_token"),
    )
    op.create_index("idx_trip_owner_created", "trip", ["owner_id", "created_at"])

    # activity table
    op.create_table(
        "activity",
        sa.Column("activity_id", sa.Uuid(), primary_key=True),
        sa.Column("trip_id", sa.Uuid(), nullable=False),
        sa.Column("document", Document, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["trip_id"], ["trip.trip_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_activity_trip", "activity", ["trip_id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_activity_trip", table_name="activity")
    op.drop_table("activity")
    op.drop_index("idx_trip_owner_created", table_name="trip")
    op.drop_table("trip")
