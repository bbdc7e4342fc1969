"""Application services: status checks and reminder runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from signflow.domain.errors import AgreementNotFound, DocumentNotFound, ProviderUnavailable
from signflow.domain.model import ReminderUrgency, email_key
from signflow.domain.reconciliation import classify, derive_flow, mark_expired
from signflow.domain.reminders import (
    DEFAULT_COOLDOWN,
    compose_reminder_note,
    reminder_kind,
    reminder_schedule,
    select_reminder_targets,
)

if TYPE_CHECKING:
    from datetime import timedelta
    from uuid import UUID

    from signflow.domain.model import Document, Recipient, ReminderKind, SigningFlow
    from signflow.domain.ports import ReminderDispatcher
    from signflow.domain.reconciliation import ReconciliationEngine, StateTransition

log = logging.getLogger(__name__)

AGREEMENT_GONE_REASON = "agreement no longer exists at provider"


@dataclass(slots=True, frozen=True, kw_only=True)
class StatusReport:
    """Result of a status check.

    ``stale`` is set when the provider could not be reached and the report
    reflects the last persisted state.
    """

    document: Document
    flow: SigningFlow
    current_signers: tuple[Recipient, ...] = ()
    transitions: tuple[StateTransition, ...] = ()
    stale: bool = False


@dataclass(slots=True, frozen=True, kw_only=True)
class ReminderOutcome:
    document: Document
    targets: tuple[Recipient, ...] = ()
    delivered: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    kind: ReminderKind | None = None
    message: str | None = None
    synced: bool = True


def _persisted_report(document: Document, *, stale: bool) -> StatusReport:
    order = classify(document.recipients, flow=document.signing_flow)
    current = () if document.status.is_terminal else order.current_signers
    return StatusReport(document=document, flow=order.flow, current_signers=current, stale=stale)


def check_status(engine: ReconciliationEngine, document_id: UUID) -> StatusReport:
    """Reconcile ``document_id`` and report where its workflow stands."""

    try:
        result = engine.reconcile(document_id)
    except AgreementNotFound as exc:
        log.warning("Agreement for document %s not found at provider: %s", document_id, exc)
        document = engine.expire(document_id, AGREEMENT_GONE_REASON)
        return _persisted_report(document, stale=False)
    except ProviderUnavailable as exc:
        log.warning(
            "Provider unavailable for document %s; reporting last known state: %s",
            document_id,
            exc,
        )
        return _persisted_report(engine.load(document_id), stale=True)
    return StatusReport(
        document=result.document,
        flow=result.flow,
        current_signers=result.current_signers,
        transitions=result.plan.transitions,
    )


def send_reminders(
    engine: ReconciliationEngine,
    dispatcher: ReminderDispatcher,
    document_id: UUID,
    *,
    cooldown: timedelta = DEFAULT_COOLDOWN,
    urgency: ReminderUrgency = ReminderUrgency.NORMAL,
    message: str | None = None,
) -> ReminderOutcome:
    """Sync ``document_id`` with the provider and remind its current signers.

    The sync, the reminder bookkeeping and any expiry are committed together.
    Nobody to remind is a successful outcome with no targets.
    """

    with engine.locks.hold(document_id), engine.unit_of_work_factory() as uow:
        document = uow.repositories.documents.get(document_id)
        if document is None:
            raise DocumentNotFound(document_id)

        synced = True
        try:
            engine.reconcile_loaded(document)
        except AgreementNotFound as exc:
            log.warning("Agreement for document %s not found at provider: %s", document_id, exc)
            mark_expired(document, AGREEMENT_GONE_REASON)
            uow.commit()
            return ReminderOutcome(document=document)
        except ProviderUnavailable as exc:
            log.warning(
                "Provider unavailable for document %s; selecting from last known state: %s",
                document_id,
                exc,
            )
            synced = False

        now = engine.clock()
        targets = select_reminder_targets(document, now=now, cooldown=cooldown)
        if not targets or document.provider_agreement_id is None:
            log.info("No reminder targets for document %s", document_id)
            uow.commit()
            return ReminderOutcome(document=document, synced=synced)

        flow = document.signing_flow or derive_flow(document.recipients)
        kind = reminder_kind(document.reminder_count, len(reminder_schedule(flow, urgency)))
        note = message or compose_reminder_note(kind, flow)
        result = dispatcher(
            agreement_id=document.provider_agreement_id,
            recipients=targets,
            message=note,
        )

        delivered = {email_key(email) for email in result.delivered}
        for target in targets:
            if target.email_key in delivered:
                target.last_reminder_sent = now
        if result.any_delivered:
            document.last_reminder_sent = now
            document.reminder_count += 1
        if result.failed:
            log.warning(
                "Reminder delivery failed for %s on document %s",
                ", ".join(result.failed),
                document_id,
            )
        uow.commit()
        return ReminderOutcome(
            document=document,
            targets=targets,
            delivered=result.delivered,
            failed=result.failed,
            kind=kind,
            message=note,
            synced=synced,
        )
