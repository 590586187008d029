"""Directory and content schema - teams, users, groups, collections, documents

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates the tables read by mention suggestions, plus the unaccent extension
used for accent-insensitive matching.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp_column(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    # gen_random_uuid() and unaccent()
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")
    op.execute("CREATE EXTENSION IF NOT EXISTS unaccent")

    # ==========================================================================
    # teams table
    # ==========================================================================
    op.create_table(
        "teams",
        _id_column(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("preferences", postgresql.JSONB(), nullable=True),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    # ==========================================================================
    # users table
    # ==========================================================================
    op.create_table(
        "users",
        _id_column(),
        sa.Column("team_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("color", sa.Text(), nullable=True),
        sa.Column("role", sa.String(length=6), server_default="member", nullable=False),
        sa.Column("language", sa.Text(), nullable=True),
        sa.Column("timezone", sa.Text(), nullable=True),
        sa.Column("preferences", postgresql.JSONB(), nullable=True),
        sa.Column("suspended_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("last_active_at", sa.TIMESTAMP(timezone=True), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "role IN ('admin', 'member', 'viewer', 'guest')", name="ck_users_role"
        ),
    )
    op.create_index("idx_users_team_id", "users", ["team_id"])
    op.create_index("idx_users_team_name", "users", ["team_id", "name", "id"])

    # ==========================================================================
    # groups table
    # ==========================================================================
    op.create_table(
        "groups",
        _id_column(),
        sa.Column("team_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("disable_mentions", sa.Boolean(), server_default="false", nullable=False),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_groups_team_id", "groups", ["team_id"])

    # ==========================================================================
    # group_users table
    # ==========================================================================
    op.create_table(
        "group_users",
        sa.Column("group_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("group_id", "user_id"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_group_users_user_id", "group_users", ["user_id"])

    # ==========================================================================
    # collections table
    # ==========================================================================
    op.create_table(
        "collections",
        _id_column(),
        sa.Column("team_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.Text(), nullable=True),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column("permission", sa.String(length=10), nullable=True),
        sa.Column("archived_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "permission IS NULL OR permission IN ('read', 'read_write')",
            name="ck_collections_permission",
        ),
    )
    op.create_index("idx_collections_team_id", "collections", ["team_id"])

    # ==========================================================================
    # collection_users table
    # ==========================================================================
    op.create_table(
        "collection_users",
        sa.Column("collection_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("permission", sa.String(length=10), server_default="read", nullable=False),
        sa.PrimaryKeyConstraint("collection_id", "user_id"),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "permission IN ('read', 'read_write')", name="ck_collection_users_permission"
        ),
    )
    op.create_index("idx_collection_users_user_id", "collection_users", ["user_id"])

    # ==========================================================================
    # documents table
    # ==========================================================================
    op.create_table(
        "documents",
        _id_column(),
        sa.Column("team_id", sa.UUID(), nullable=False),
        sa.Column("collection_id", sa.UUID(), nullable=True),
        sa.Column("created_by_id", sa.UUID(), nullable=True),
        sa.Column("title", sa.Text(), server_default="", nullable=False),
        sa.Column("url_id", sa.Text(), nullable=False),
        sa.Column("published_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("archived_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("url_id", name="uq_documents_url_id"),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_documents_team_id", "documents", ["team_id"])
    op.create_index("idx_documents_collection_id", "documents", ["collection_id"])
    op.create_index(
        "idx_documents_team_updated",
        "documents",
        ["team_id", sa.text("updated_at DESC"), "id"],
    )


def downgrade() -> None:
    op.drop_table("documents")
    op.drop_table("collection_users")
    op.drop_table("collections")
    op.drop_table("group_users")
    op.drop_table("groups")
    op.drop_table("users")
    op.drop_table("teams")
    op.execute("DROP EXTENSION IF EXISTS unaccent")
