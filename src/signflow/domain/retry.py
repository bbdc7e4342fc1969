"""Bounded exponential backoff around provider calls."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from signflow.domain.errors import ProviderUnavailable

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True, kw_only=True)
class BackoffPolicy:
    """Retry ``ProviderUnavailable`` with exponentially growing waits.

    The n-th retry waits ``backoff_factor * 2 ** (n - 1)`` seconds, capped at
    ``max_backoff_wait``. When ``deadline_seconds`` is set, no retry is started
    whose wait would end past the deadline.
    """

    max_attempts: int = 3
    backoff_factor: float = 1.0
    max_backoff_wait: float = 30.0
    deadline_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_factor < 0 or self.max_backoff_wait < 0:
            raise ValueError("backoff waits must be >= 0")

    def wait_for(self, retry_number: int) -> float:
        return min(self.max_backoff_wait, self.backoff_factor * 2 ** (retry_number - 1))

    def call[T](
        self,
        func: Callable[[], T],
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> T:
        started = clock()
        attempt = 1
        while True:
            try:
                return func()
            except ProviderUnavailable as exc:
                if attempt >= self.max_attempts:
                    log.warning("Provider unavailable after %d attempt(s): %s", attempt, exc)
                    raise
                wait = self.wait_for(attempt)
                if self.deadline_seconds is not None and (
                    clock() - started + wait > self.deadline_seconds
                ):
                    log.warning("Provider retry deadline reached after %d attempt(s)", attempt)
                    raise
                log.info(
                    "Provider unavailable (attempt %d/%d), retrying in %.2fs: %s",
                    attempt,
                    self.max_attempts,
                    wait,
                    exc,
                )
                sleep(wait)
                attempt += 1
