"""Organization installations with cached access tokens.

Revision ID: 001_organization
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_organization"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _has_table(bind, name: str) -> bool:
    return sa.inspect(bind).has_table(name)


def upgrade() -> None:
    bind = op.get_bind()

    if not _has_table(bind, "organization"):
        op.create_table(
            "organization",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("domain", sa.String(length=255), nullable=True),
            sa.Column("organization_id", sa.Integer(), nullable=False),
            sa.Column("app_id", sa.String(length=255), nullable=False),
            sa.Column("app_secret", sa.Text(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("base_url", sa.String(length=500), nullable=False),
            sa.Column("access_token", sa.Text(), nullable=True),
            sa.Column("access_token_expires", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            "ix_organization_domain_org",
            "organization",
            ["domain", "organization_id"],
            unique=False,
        )


def downgrade() -> None:
    bind = op.get_bind()
    if _has_table(bind, "organization"):
        op.drop_index("ix_organization_domain_org", table_name="organization")
        op.drop_table("organization")
