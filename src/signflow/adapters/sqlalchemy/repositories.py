"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from signflow.adapters.sqlalchemy.mappings import document_table
from signflow.domain.model import Document

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.orm import Session


class SqlAlchemyDocumentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Document) -> None:
        self.session.add(entity)

    def get(self, document_id: UUID) -> Document | None:
        return self.session.get(Document, document_id)

    def get_by_agreement_id(self, agreement_id: str) -> Document | None:
        stmt = select(Document).where(document_table.c.provider_agreement_id == agreement_id)
        return self.session.execute(stmt).scalar_one_or_none()


if TYPE_CHECKING:
    from signflow.domain.ports.persistence import DocumentRepository

    def _check_repository(session: Session) -> DocumentRepository:
        return SqlAlchemyDocumentRepository(session)
