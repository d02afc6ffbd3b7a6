"""Create profiles and messages tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

Tables: profiles, messages
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create profiles and messages tables."""
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("tier", sa.String(20), nullable=False, server_default="Free"),
        sa.Column("points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default="false"),
        sa.Column(
            "personalization", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")
        ),
        sa.Column(
            "saved_items", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")
        ),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.CheckConstraint("points >= 0 OR is_admin", name="ck_profiles_points"),
    )

    op.create_table(
        "messages",
        sa.Column(
            "id", UUID, primary_key=True, server_default=sa.text("gen_random_uuid()")
        ),
        sa.Column("owner_id", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("clock_timestamp()"),
        ),
    )
    op.create_index("idx_messages_owner_created", "messages", ["owner_id", "created_at"])


def downgrade() -> None:
    """Drop profiles and messages tables."""
    op.drop_index("idx_messages_owner_created", table_name="messages")
    op.drop_table("messages")
    op.drop_table("profiles")
