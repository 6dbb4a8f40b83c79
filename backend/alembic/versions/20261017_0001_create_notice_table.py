"""create notice table

Revision ID: 20261017_0001
"""

import sqlalchemy as sa
from alembic import op


revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "notice",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("content_delta", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("publish_time", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("status IN ('draft', 'published')", name="ck_notice_status"),
    )
    op.create_index("ix_notice_id", "notice", ["id"])
    op.create_index("ix_notice_status", "notice", ["status"])
    op.create_index("ix_notice_created_at", "notice", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_notice_created_at", table_name="notice")
    op.drop_index("ix_notice_status", table_name="notice")
    op.drop_index("ix_notice_id", table_name="notice")
    op.drop_table("notice")
