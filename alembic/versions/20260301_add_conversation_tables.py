"""Add conversation and message tables

Revision ID: 20260301_add_conversation_tables
Revises:
Create Date: 2026-03-01 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260301_add_conversation_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create conversation table
    op.create_table(
        "conversation",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(500), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )

    # Create message table
    op.create_table(
        "message",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("conversation_id", sa.String(36), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),  # 'USER' or 'ASSISTANT'
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('USER', 'ASSISTANT')", name="message_role"),
        sa.UniqueConstraint(
            "conversation_id", "position", name="uq_message_conversation_position"
        ),
    )

    # Add foreign key constraint
    op.create_foreign_key(
        "fk_message_conversation_id",
        "message",
        "conversation",
        ["conversation_id"],
        ["id"],
        ondelete="CASCADE",
    )

    # Create indexes for efficient querying
    op.create_index(
        "ix_conversation_updated_at", "conversation", [sa.text("updated_at DESC")]
    )
    op.create_index(
        "ix_message_conversation_created_at",
        "message",
        ["conversation_id", "created_at"],
    )


def downgrade() -> None:
    # Drop indexes
    op.drop_index("ix_message_conversation_created_at", table_name="message")
    op.drop_index("ix_conversation_updated_at", table_name="conversation")

    # Drop foreign key constraint
    op.drop_constraint("fk_message_conversation_id", "message", type_="foreignkey")

    # Drop tables
    op.drop_table("message")
    op.drop_table("conversation")
