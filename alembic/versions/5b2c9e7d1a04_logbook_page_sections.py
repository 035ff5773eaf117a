"""logbooks, members, invites, page_sections and content audit log

Revision ID: 5b2c9e7d1a04
Revises:
Create Date: 2026-10-19 10:12:41.306215

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5b2c9e7d1a04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# JSONB en PostgreSQL, JSON en SQLite
JSONDoc = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=160), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=160), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "logbooks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(length=80), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("baby_name", sa.String(length=160), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("theme", sa.String(length=40), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        # overrides mínimos por página; NULL = todo por defecto
        sa.Column("page_sections", JSONDoc, nullable=True),
        # token de concurrencia optimista (version_id_col)
        sa.Column("page_sections_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_logbooks_slug", "logbooks", ["slug"], unique=True)

    op.create_table(
        "logbook_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("logbook_id", sa.Integer(), sa.ForeignKey("logbooks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(length=6), nullable=False),
        sa.Column("last_visited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("logbook_id", "user_id", name="uq_logbook_member"),
    )
    op.create_index("ix_logbook_members_user_id", "logbook_members", ["user_id"], unique=False)

    op.create_table(
        "invite_codes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=16), nullable=False),
        sa.Column("logbook_id", sa.Integer(), sa.ForeignKey("logbooks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(length=6), nullable=False),
        sa.Column("max_uses", sa.Integer(), nullable=False),
        sa.Column("uses_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_invite_codes_code", "invite_codes", ["code"], unique=True)
    op.create_index("ix_invite_codes_logbook_id", "invite_codes", ["logbook_id"], unique=False)

    op.create_table(
        "content_audit_logs",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), primary_key=True, autoincrement=True),
        sa.Column("logbook_id", sa.Integer(), sa.ForeignKey("logbooks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("page_type", sa.String(length=32), nullable=False),
        sa.Column("action", sa.String(length=17), nullable=False),
        sa.Column("details", JSONDoc, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        "ix_content_audit_logs_logbook_created",
        "content_audit_logs",
        ["logbook_id", "created_at"],
        unique=False
    )
    op.create_index(
        "ix_content_audit_logs_action",
        "content_audit_logs",
        ["action"],
        unique=False
    )


def downgrade():
    op.drop_index("ix_content_audit_logs_action", table_name="content_audit_logs")
    op.drop_index("ix_content_audit_logs_logbook_created", table_name="content_audit_logs")
    op.drop_table("content_audit_logs")

    op.drop_index("ix_invite_codes_logbook_id", table_name="invite_codes")
    op.drop_index("ix_invite_codes_code", table_name="invite_codes")
    op.drop_table("invite_codes")

    op.drop_index("ix_logbook_members_user_id", table_name="logbook_members")
    op.drop_table("logbook_members")

    op.drop_index("ix_logbooks_slug", table_name="logbooks")
    op.drop_table("logbooks")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
