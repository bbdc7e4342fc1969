"""Per-document single-writer locks (process local)."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID


@dataclass(slots=True)
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


@dataclass(slots=True)
class DocumentLocks:
    """Serialize work on the same document; different documents never block each other.

    An entry lives only while some caller is inside ``hold`` for its document.
    """

    _entries: dict[UUID, _Entry] = field(default_factory=dict, repr=False)
    _guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def lock_for(self, document_id: UUID) -> threading.Lock:
        """Return the lock currently shared by holders of ``document_id``.

        Outside ``hold`` this is a fresh, unregistered lock.
        """
        with self._guard:
            entry = self._entries.get(document_id)
            return entry.lock if entry is not None else threading.Lock()

    def active_count(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, document_id: UUID) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(document_id)
            if entry is None:
                entry = self._entries[document_id] = _Entry()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[document_id]
