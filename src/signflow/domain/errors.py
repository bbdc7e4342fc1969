"""Domain error hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class SignflowError(RuntimeError):
    """Base class for signature workflow errors."""


class ProviderError(SignflowError):
    """The signature provider rejected or failed a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderUnavailable(ProviderError):
    """Transient provider failure (network, timeout, rate limit, 5xx)."""


class AgreementNotFound(ProviderError):
    """The provider no longer knows the agreement or denies access to it."""


class MalformedProviderShape(SignflowError):
    """A provider payload did not match the shape a locator expected."""


class DocumentNotFound(SignflowError):
    def __init__(self, document_id: UUID) -> None:
        super().__init__(f"Unknown document: {document_id}")
        self.document_id = document_id


class ReconciliationInvariantError(SignflowError):
    """A reconciliation plan would regress a terminal recipient state."""
