"""Create document and recipient tables.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from signflow.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_ENUM_LENGTH = 32


def upgrade() -> None:
    op.create_table(
        "document",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("signing_flow", sa.String(length=_ENUM_LENGTH), nullable=True),
        sa.Column("status", sa.String(length=_ENUM_LENGTH), nullable=False),
        sa.Column("status_reason", sa.String(), nullable=True),
        sa.Column("provider_agreement_id", sa.String(), nullable=True),
        sa.Column("completed_at", UTCDateTime(), nullable=True),
        sa.Column("last_reminder_sent", UTCDateTime(), nullable=True),
        sa.Column("reminder_count", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_document"),
        sa.UniqueConstraint("provider_agreement_id", name="uq_document_provider_agreement_id"),
    )
    op.create_table(
        "recipient",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("document_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("signing_order", sa.Integer(), nullable=False),
        sa.Column("state", sa.String(length=_ENUM_LENGTH), nullable=False),
        sa.Column("signing_url", sa.String(), nullable=True),
        sa.Column("signed_at", UTCDateTime(), nullable=True),
        sa.Column("last_signing_url_accessed", UTCDateTime(), nullable=True),
        sa.Column("last_reminder_sent", UTCDateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["document_id"],
            ["document.id"],
            name="fk_recipient_document_id_document",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_recipient"),
        sa.UniqueConstraint("document_id", "email", name="uq_recipient_document_email"),
    )


def downgrade() -> None:
    op.drop_table("recipient")
    op.drop_table("document")
