"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from signflow.domain.model import Document

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class DocumentRepository(Repository[Document], Protocol):
    """Persistence contract for documents and their embedded recipients."""

    def get(self, document_id: UUID) -> Document | None: ...

    def get_by_agreement_id(self, agreement_id: str) -> Document | None: ...
