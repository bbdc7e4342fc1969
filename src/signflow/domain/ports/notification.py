"""Port for delivering reminder notifications."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from signflow.domain.model import Recipient


@dataclass(slots=True, frozen=True)
class DispatchResult:
    """Per-recipient delivery outcome, keyed by the recipients' emails."""

    delivered: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def any_delivered(self) -> bool:
        return bool(self.delivered)


@runtime_checkable
class ReminderDispatcher(Protocol):
    """Send ``message`` to ``recipients`` of the agreement and report delivery."""

    def __call__(
        self,
        *,
        agreement_id: str,
        recipients: Sequence[Recipient],
        message: str,
    ) -> DispatchResult: ...
