"""Domain port definitions for adapters."""

from __future__ import annotations

from .notification import DispatchResult, ReminderDispatcher
from .persistence import DocumentRepository, Repository
from .provider import ProviderSnapshot, ProviderStatusSource
from .unit_of_work import (
    DocumentRepositories,
    DocumentUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "DispatchResult",
    "DocumentRepositories",
    "DocumentRepository",
    "DocumentUnitOfWork",
    "ProviderSnapshot",
    "ProviderStatusSource",
    "ReminderDispatcher",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]
