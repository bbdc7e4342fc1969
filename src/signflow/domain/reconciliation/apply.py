"""Apply a reconciliation plan to a document."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from signflow.domain.errors import ReconciliationInvariantError
from signflow.domain.model import DocumentStatus

from .merge import is_allowed_transition
from .plan import ReconciledDocument

if TYPE_CHECKING:
    from uuid import UUID

    from signflow.domain.model import Document, Recipient

    from .plan import ReconciliationPlan

log = logging.getLogger(__name__)


def _validate(document: Document, plan: ReconciliationPlan) -> dict[UUID, Recipient]:
    if plan.document_id != document.id:
        raise ReconciliationInvariantError(
            f"Plan for document {plan.document_id} applied to document {document.id}"
        )
    if document.status.is_terminal and plan.status is not document.status:
        raise ReconciliationInvariantError(
            f"Document {document.id} would leave terminal status {document.status}"
        )

    by_id = {recipient.id: recipient for recipient in document.recipients}
    violations: list[str] = []
    for update in plan.recipient_updates:
        recipient = by_id.get(update.recipient_id)
        if recipient is None:
            violations.append(f"{update.email}: not part of the document")
            continue
        if recipient.state is not update.previous_state:
            violations.append(
                f"{update.email}: planned from {update.previous_state}, found {recipient.state}"
            )
        elif not is_allowed_transition(recipient.state, update.state):
            violations.append(f"{update.email}: {recipient.state} -> {update.state}")
    if violations:
        raise ReconciliationInvariantError(
            "Reconciliation plan violates monotonic progress: " + "; ".join(violations)
        )
    return by_id


def apply_plan(document: Document, plan: ReconciliationPlan) -> ReconciledDocument:
    """Validate ``plan`` against ``document`` and then mutate the document.

    Validation covers the whole plan before the first mutation so a rejected
    plan leaves the document untouched.
    """

    by_id = _validate(document, plan)

    for update in plan.recipient_updates:
        recipient = by_id[update.recipient_id]
        if update.state_changed:
            log.info(
                "Recipient %s: %s -> %s (provider status %r)",
                recipient.email,
                recipient.state,
                update.state,
                update.provider_status,
            )
            recipient.state = update.state
        if update.signed_at is not None and recipient.signed_at is None:
            recipient.signed_at = update.signed_at
        accessed = update.last_signing_url_accessed
        if accessed is not None and recipient.last_signing_url_accessed is None:
            recipient.last_signing_url_accessed = accessed
        if update.signing_url is not None:
            recipient.signing_url = update.signing_url

    if plan.status_changed:
        log.info("Document %s: %s -> %s", document.id, document.status, plan.status)
        document.status = plan.status
        if plan.status_reason is not None:
            document.status_reason = plan.status_reason
    if plan.completed_at is not None and document.completed_at is None:
        document.completed_at = plan.completed_at

    current_signers = tuple(by_id[recipient_id] for recipient_id in plan.current_signer_ids)
    return ReconciledDocument(document=document, plan=plan, current_signers=current_signers)


def mark_expired(document: Document, reason: str) -> bool:
    """Expire ``document`` unless it already reached a terminal status."""

    if document.status.is_terminal:
        log.info(
            "Document %s already %s; not expiring (%s)", document.id, document.status, reason
        )
        return False
    log.warning("Expiring document %s: %s", document.id, reason)
    document.status = DocumentStatus.EXPIRED
    document.status_reason = reason
    return True
