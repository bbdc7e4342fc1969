"""Port for reading agreement status from the signature provider."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(slots=True, frozen=True, kw_only=True)
class ProviderSnapshot:
    """Raw provider data for one agreement, fetched in one go.

    ``agreement`` is the agreement payload (participants may be embedded in
    one of several shapes). The supplementary payloads are ``None`` when the
    provider did not return them.
    """

    agreement_id: str
    agreement: Mapping[str, Any] = field(default_factory=dict)
    form_data: object | None = None
    events: Mapping[str, Any] | None = None
    signing_urls: Mapping[str, Any] | None = None

    @property
    def agreement_status(self) -> str | None:
        status = self.agreement.get("status")
        return status if isinstance(status, str) else None


@runtime_checkable
class ProviderStatusSource(Protocol):
    """Fetch a status snapshot for ``agreement_id``.

    Raises ``ProviderUnavailable`` for transient failures and
    ``AgreementNotFound`` when the agreement is gone or access is denied.
    """

    def __call__(self, agreement_id: str) -> ProviderSnapshot: ...
