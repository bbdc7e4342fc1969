"""SQLAlchemy adapter package for signflow."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    document_table,
    mapper_registry,
    recipient_table,
    start_mappers,
)
from .repositories import SqlAlchemyDocumentRepository
from .unit_of_work import (
    BaseSqlAlchemyUnitOfWork,
    SqlAlchemyDocumentUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "BaseSqlAlchemyUnitOfWork",
    "SqlAlchemyDocumentRepository",
    "SqlAlchemyDocumentUnitOfWork",
    "StartupError",
    "create_all_tables",
    "document_table",
    "mapper_registry",
    "recipient_table",
    "shutdown",
    "start_mappers",
    "startup",
]
