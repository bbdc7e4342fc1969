"""Reconcile local documents with the signature provider.

``reconcile_document`` is the pure core: it turns a document plus a provider
snapshot into a ``ReconciliationPlan``. ``ReconciliationEngine`` wraps it with
the side effects (locking, provider retries, loading and committing).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING

from signflow.common.clock import as_utc, utc_now
from signflow.domain.errors import DocumentNotFound
from signflow.domain.locks import DocumentLocks
from signflow.domain.model import DocumentStatus, RecipientState, email_key
from signflow.domain.retry import BackoffPolicy

from .aggregate import aggregate_status
from .apply import apply_plan, mark_expired
from .evidence import SignEvidence, collect_evidence
from .locate import DEFAULT_LOCATORS, locate_participants, locate_signing_urls
from .merge import merge_state
from .normalize import StatusSignals, normalize_status
from .ordering import classify
from .plan import ReconciliationPlan, RecipientUpdate

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime
    from uuid import UUID

    from signflow.domain.model import Document, Recipient
    from signflow.domain.ports import DocumentUnitOfWork, ProviderSnapshot, ProviderStatusSource

    from .locate import Locator, ParticipantEntry
    from .plan import ReconciledDocument

log = logging.getLogger(__name__)

_ACCESS_STATES = frozenset({RecipientState.VIEWED, RecipientState.SIGNED})


@dataclass(slots=True, frozen=True)
class _ProjectedRecipient:
    """Recipient as it will look once the plan is applied."""

    id: UUID
    email: str
    order: int
    state: RecipientState


def _first_timestamp(
    *candidates: datetime | None, now: datetime, what: str, email: str
) -> datetime:
    for candidate in candidates:
        if candidate is not None:
            return as_utc(candidate)
    log.warning("No provider timestamp for %s of %s; using current time", what, email)
    return now


def _plan_recipient(
    recipient: Recipient,
    entry: ParticipantEntry,
    *,
    evidence: SignEvidence,
    agreement_status: str | None,
    signing_url: str | None,
    now: datetime,
) -> RecipientUpdate:
    signals = StatusSignals(
        participant_set_status=entry.participant_set_status,
        agreement_status=agreement_status,
        has_form_field_signature=evidence.has_form_field_signature(recipient.email, entry.order),
        has_sign_event=evidence.has_sign_event(recipient.email),
    )
    candidate = normalize_status(entry.status, signals)
    state = merge_state(recipient.state, candidate)
    if state is not candidate:
        log.info(
            "Ignoring regression for %s: %s -> %s (provider status %r)",
            recipient.email,
            recipient.state,
            candidate,
            entry.status,
        )

    signed_at = None
    if state is RecipientState.SIGNED and recipient.signed_at is None:
        signed_at = _first_timestamp(
            entry.completed_at,
            evidence.signed_event_at(recipient.email),
            now=now,
            what="signature",
            email=recipient.email,
        )

    accessed_at = None
    if state in _ACCESS_STATES and recipient.last_signing_url_accessed is None:
        accessed_at = _first_timestamp(
            entry.accessed_at,
            evidence.viewed_event_at(recipient.email),
            now=now,
            what="access",
            email=recipient.email,
        )

    return RecipientUpdate(
        recipient_id=recipient.id,
        email=recipient.email,
        previous_state=recipient.state,
        state=state,
        provider_status=entry.status,
        signed_at=signed_at,
        last_signing_url_accessed=accessed_at,
        signing_url=signing_url if signing_url != recipient.signing_url else None,
    )


def _status_reason(status: DocumentStatus, agreement_status: str | None) -> str | None:
    if status is DocumentStatus.CANCELLED:
        return f"cancelled (provider agreement status {agreement_status or 'n/a'})"
    if status is DocumentStatus.EXPIRED:
        return f"expired (provider agreement status {agreement_status or 'n/a'})"
    return None


def reconcile_document(
    document: Document,
    snapshot: ProviderSnapshot | None,
    *,
    now: datetime,
    locators: Sequence[Locator] = DEFAULT_LOCATORS,
) -> ReconciliationPlan:
    """Compute the changes ``snapshot`` implies for ``document`` without mutating it.

    Recipients the provider does not report are left as they are. A document
    that already reached a terminal status keeps it.
    """

    agreement_status = snapshot.agreement_status if snapshot is not None else None
    entries: dict[str, ParticipantEntry] = {}
    evidence = SignEvidence()
    signing_urls: dict[str, str] = {}
    if snapshot is not None:
        for entry in locate_participants(snapshot.agreement, locators):
            entries.setdefault(email_key(entry.email), entry)
        evidence = collect_evidence(form_data=snapshot.form_data, events=snapshot.events)
        signing_urls = locate_signing_urls(snapshot.signing_urls)

    updates: list[RecipientUpdate] = []
    projected: list[_ProjectedRecipient] = []
    for recipient in document.recipients:
        entry = entries.get(recipient.email_key)
        state = recipient.state
        if entry is None:
            if snapshot is not None:
                log.debug("Recipient %s not reported by provider", recipient.email)
        else:
            update = _plan_recipient(
                recipient,
                entry,
                evidence=evidence,
                agreement_status=agreement_status,
                signing_url=signing_urls.get(recipient.email_key),
                now=now,
            )
            state = update.state
            if update.changed:
                updates.append(update)
        projected.append(
            _ProjectedRecipient(
                id=recipient.id, email=recipient.email, order=recipient.order, state=state
            )
        )

    order = classify(projected, flow=document.signing_flow)

    status = document.status
    if not document.status.is_terminal and (document.transmitted or projected):
        status = aggregate_status(
            projected,
            flow=order.flow,
            transmitted=document.transmitted,
            agreement_status=agreement_status,
        )

    completed_at = None
    if status is DocumentStatus.COMPLETED and document.completed_at is None:
        completed_at = now
    status_reason = None
    if status is not document.status:
        status_reason = _status_reason(status, agreement_status)

    return ReconciliationPlan(
        document_id=document.id,
        flow=order.flow,
        previous_status=document.status,
        status=status,
        recipient_updates=tuple(updates),
        current_signer_ids=()
        if status.is_terminal
        else tuple(signer.id for signer in order.current_signers),
        completed_at=completed_at,
        status_reason=status_reason,
    )


@dataclass(slots=True, kw_only=True)
class ReconciliationEngine:
    """Load, reconcile and persist one document at a time."""

    fetch_snapshot: ProviderStatusSource
    unit_of_work_factory: Callable[[], DocumentUnitOfWork]
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    locks: DocumentLocks = field(default_factory=DocumentLocks)
    clock: Callable[[], datetime] = utc_now
    locators: Sequence[Locator] = DEFAULT_LOCATORS

    def fetch(self, agreement_id: str) -> ProviderSnapshot:
        """Fetch a snapshot under the backoff policy."""
        return self.backoff.call(partial(self.fetch_snapshot, agreement_id))

    def reconcile(self, document_id: UUID) -> ReconciledDocument:
        """Reconcile ``document_id`` and commit the result.

        Raises ``ProviderUnavailable`` once retries are exhausted and
        ``AgreementNotFound`` when the provider no longer knows the agreement;
        in both cases nothing is committed.
        """

        with self.locks.hold(document_id), self.unit_of_work_factory() as uow:
            document = uow.repositories.documents.get(document_id)
            if document is None:
                raise DocumentNotFound(document_id)
            result = self.reconcile_loaded(document)
            uow.commit()
            return result

    def reconcile_loaded(self, document: Document) -> ReconciledDocument:
        """Reconcile a document loaded by the caller's unit of work; the caller commits."""

        snapshot = None
        if document.provider_agreement_id is not None:
            snapshot = self.fetch(document.provider_agreement_id)
        else:
            log.debug("Document %s not transmitted; skipping provider", document.id)
        plan = reconcile_document(document, snapshot, now=self.clock(), locators=self.locators)
        return apply_plan(document, plan)

    def load(self, document_id: UUID) -> Document:
        """Return the persisted document without contacting the provider."""

        with self.unit_of_work_factory() as uow:
            document = uow.repositories.documents.get(document_id)
            if document is None:
                raise DocumentNotFound(document_id)
            return document

    def expire(self, document_id: UUID, reason: str) -> Document:
        """Mark ``document_id`` expired, unless it is already terminal."""

        with self.locks.hold(document_id), self.unit_of_work_factory() as uow:
            document = uow.repositories.documents.get(document_id)
            if document is None:
                raise DocumentNotFound(document_id)
            if mark_expired(document, reason):
                uow.commit()
            return document
