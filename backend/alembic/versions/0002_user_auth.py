"""user auth fields

Revision ID: 0002_user_auth
Revises: 0001_init
Create Date: 2026-10-19

"""

from __future__ import annotations

import secrets

from alembic import op
import sqlalchemy as sa

from family_ledger.core.security import hash_password


revision = "0002_user_auth"
down_revision = "0001_init"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("users", sa.Column("username", sa.String(length=30), nullable=True))
    op.add_column("users", sa.Column("password_hash", sa.String(length=255), nullable=True))
    op.add_column(
        "users",
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
    )
    op.add_column("users", sa.Column("last_login", sa.DateTime(), nullable=True))
    op.add_column("users", sa.Column("refresh_token", sa.String(length=512), nullable=True))

    # Backfill existing rows: username from the email local part plus id, and an
    # unguessable password that an admin must reset via PATCH /api/users/{id}.
    conn = op.get_bind()
    rows = conn.execute(sa.text("SELECT id, email FROM users")).all()
    for user_id, email in rows:
        username = f"{str(email).split('@')[0][:24]}{user_id}"
        conn.execute(
            sa.text("UPDATE users SET username = :username, password_hash = :password_hash WHERE id = :id"),
            {"username": username, "password_hash": hash_password(secrets.token_urlsafe(24)), "id": user_id},
        )

    op.alter_column("users", "username", existing_type=sa.String(length=30), nullable=False)
    op.alter_column("users", "password_hash", existing_type=sa.String(length=255), nullable=False)
    op.create_index("ix_users_username", "users", ["username"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_users_username", table_name="users")
    op.drop_column("users", "refresh_token")
    op.drop_column("users", "last_login")
    op.drop_column("users", "is_active")
    op.drop_column("users", "password_hash")
    op.drop_column("users", "username")
