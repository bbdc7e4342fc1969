"""SQLAlchemy-backed unit of work for documents.

The adapter keeps one process-wide engine and session factory, set up by
``startup()``. Each unit of work opens its own session on ``__enter__`` and
closes it on ``__exit__``; an exception inside the block rolls back.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from signflow.adapters.sqlalchemy.mappings import start_mappers
from signflow.adapters.sqlalchemy.migrations import upgrade_head
from signflow.adapters.sqlalchemy.repositories import SqlAlchemyDocumentRepository
from signflow.config.storage import get_database_config
from signflow.domain.ports.unit_of_work import DocumentRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """The SQLAlchemy adapter is used before ``startup()`` or configured twice."""


@dataclass(slots=True)
class _Database:
    engine: Engine
    session_factory: sessionmaker[Session]


_database: _Database | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Create (or adopt) the engine, map the model and migrate the schema to head."""

    global _database  # noqa: PLW0603
    if _database is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised; pass force=True to reconfigure"
        )

    resolved = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=resolved)
    _database = _Database(
        engine=resolved,
        session_factory=sessionmaker(bind=resolved, expire_on_commit=False),
    )
    log.info("Database ready at %s", resolved.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _database.engine if _database is not None else None


def is_started() -> bool:
    return _database is not None


def shutdown() -> None:
    """Dispose the engine and forget it; ``startup()`` may be called again."""

    global _database  # noqa: PLW0603
    if _database is not None:
        _database.engine.dispose()
    _database = None


def _session_factory() -> sessionmaker[Session]:
    if _database is None:
        raise StartupError(
            "SQLAlchemy adapter not initialised; call "
            "signflow.adapters.sqlalchemy.startup() before opening a unit of work"
        )
    return _database.session_factory


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block, exposing a typed repository collection."""

    def __init__(self) -> None:
        self.session_factory = _session_factory()
        self._open: tuple[Session, TRepositories] | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._open is not None:
            raise StartupError("Unit of work session already initialised")
        session = self.session_factory()
        self._open = (session, self._build_repositories(session))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                log.debug("Rolling back unit of work after %s", exc_type.__name__)
                session.rollback()
        finally:
            session.close()
            self._open = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def session(self) -> Session:
        return self._require_open()[0]

    @property
    def repositories(self) -> TRepositories:
        return self._require_open()[1]

    def _require_open(self) -> tuple[Session, TRepositories]:
        if self._open is None:
            raise StartupError("Unit of work session not initialised")
        return self._open


class SqlAlchemyDocumentUnitOfWork(BaseSqlAlchemyUnitOfWork[DocumentRepositories]):
    def _build_repositories(self, session: Session) -> DocumentRepositories:
        return DocumentRepositories(documents=SqlAlchemyDocumentRepository(session))


if TYPE_CHECKING:
    from signflow.domain.ports.unit_of_work import DocumentUnitOfWork

    _uow_check: DocumentUnitOfWork = SqlAlchemyDocumentUnitOfWork()
