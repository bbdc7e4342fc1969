"""SQLAlchemy mapping metadata for documents and recipients."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import configure_mappers, relationship

from signflow.domain.model import (
    Document,
    DocumentStatus,
    Recipient,
    RecipientState,
    SigningFlow,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

document_table = Table(
    "document",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=True),
    Column("signing_flow", Enum(SigningFlow, native_enum=False), nullable=True),
    Column("status", Enum(DocumentStatus, native_enum=False), nullable=False),
    Column("status_reason", String, nullable=True),
    Column("provider_agreement_id", String, nullable=True),
    Column("completed_at", UTCDateTime(), nullable=True),
    Column("last_reminder_sent", UTCDateTime(), nullable=True),
    Column("reminder_count", Integer, nullable=False, default=0),
    UniqueConstraint("provider_agreement_id", name="uq_document_provider_agreement_id"),
)

recipient_table = Table(
    "recipient",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "document_id",
        UUIDColumnType,
        ForeignKey("document.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("position", Integer, key="_position", nullable=False),
    Column("email", String, nullable=False),
    Column("name", String, nullable=True),
    Column("signing_order", Integer, key="order", nullable=False, default=1),
    Column("state", Enum(RecipientState, native_enum=False), nullable=False),
    Column("signing_url", String, nullable=True),
    Column("signed_at", UTCDateTime(), nullable=True),
    Column("last_signing_url_accessed", UTCDateTime(), nullable=True),
    Column("last_reminder_sent", UTCDateTime(), nullable=True),
    UniqueConstraint("document_id", "email", name="uq_recipient_document_email"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Recipient, recipient_table)

    mapper_registry.map_imperatively(
        Document,
        document_table,
        properties={
            "_recipients": relationship(
                Recipient,
                order_by=recipient_table.c._position,  # noqa: SLF001
                collection_class=ordering_list("_position"),
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
