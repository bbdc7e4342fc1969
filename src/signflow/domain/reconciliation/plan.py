"""Reconciliation plan types.

A plan is computed from a document and a provider snapshot without touching
the document. ``apply.apply_plan`` is the only place that mutates domain
objects from a plan, so every change made by one reconciliation pass is
visible here first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from signflow.domain.model import (
        Document,
        DocumentStatus,
        Recipient,
        RecipientState,
        SigningFlow,
    )


@dataclass(slots=True, frozen=True, kw_only=True)
class StateTransition:
    """One observable status change, for logging and change detection."""

    subject: str
    previous: str
    current: str


@dataclass(slots=True, frozen=True, kw_only=True)
class RecipientUpdate:
    """Target values for one recipient; ``None`` fields are left unchanged."""

    recipient_id: UUID
    email: str
    previous_state: RecipientState
    state: RecipientState
    provider_status: str | None = None
    signed_at: datetime | None = None
    last_signing_url_accessed: datetime | None = None
    signing_url: str | None = None

    @property
    def state_changed(self) -> bool:
        return self.state is not self.previous_state

    @property
    def changed(self) -> bool:
        return (
            self.state_changed
            or self.signed_at is not None
            or self.last_signing_url_accessed is not None
            or self.signing_url is not None
        )


@dataclass(slots=True, frozen=True, kw_only=True)
class ReconciliationPlan:
    document_id: UUID
    flow: SigningFlow
    previous_status: DocumentStatus
    status: DocumentStatus
    recipient_updates: tuple[RecipientUpdate, ...] = ()
    current_signer_ids: tuple[UUID, ...] = ()
    completed_at: datetime | None = None
    status_reason: str | None = None

    @property
    def status_changed(self) -> bool:
        return self.status is not self.previous_status

    @property
    def transitions(self) -> tuple[StateTransition, ...]:
        changes = [
            StateTransition(
                subject=update.email,
                previous=update.previous_state.value,
                current=update.state.value,
            )
            for update in self.recipient_updates
            if update.state_changed
        ]
        if self.status_changed:
            changes.append(
                StateTransition(
                    subject="document",
                    previous=self.previous_status.value,
                    current=self.status.value,
                )
            )
        return tuple(changes)

    @property
    def has_changes(self) -> bool:
        return (
            self.status_changed
            or self.completed_at is not None
            or any(update.changed for update in self.recipient_updates)
        )


@dataclass(slots=True, frozen=True, kw_only=True)
class ReconciledDocument:
    """A document after a reconciliation pass, with its signing order."""

    document: Document
    plan: ReconciliationPlan
    current_signers: tuple[Recipient, ...]

    @property
    def flow(self) -> SigningFlow:
        return self.plan.flow

    @property
    def status(self) -> DocumentStatus:
        return self.document.status
