"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from signflow.adapters.adobe_sign import AdobeSignReminderDispatcher, AdobeSignStatusSource
from signflow.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyDocumentUnitOfWork,
    is_started,
    startup,
)
from signflow.config.workflow import get_workflow_config
from signflow.domain.model import ReminderUrgency
from signflow.domain.ports.unit_of_work import DocumentUnitOfWork
from signflow.domain.reconciliation import ReconciliationEngine
from signflow.domain.retry import BackoffPolicy
from signflow.domain.workflow import check_status, send_reminders

if TYPE_CHECKING:
    from datetime import timedelta
    from uuid import UUID

    from signflow.config.workflow import WorkflowConfig
    from signflow.domain.ports import ProviderStatusSource, ReminderDispatcher
    from signflow.domain.workflow import ReminderOutcome, StatusReport

UnitOfWorkFactory = Callable[[], DocumentUnitOfWork]


log = getLogger(__name__)


def build_engine(
    *,
    source: ProviderStatusSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: WorkflowConfig | None = None,
) -> ReconciliationEngine:
    """Wire a reconciliation engine from configuration and the default adapters."""

    workflow = config or get_workflow_config()
    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyDocumentUnitOfWork
    return ReconciliationEngine(
        fetch_snapshot=source or AdobeSignStatusSource(timeout_seconds=workflow.timeout_seconds),
        unit_of_work_factory=unit_of_work_factory,
        backoff=BackoffPolicy(
            max_attempts=workflow.max_attempts,
            backoff_factor=workflow.backoff_seconds,
        ),
    )


def check_document_status(
    document_id: UUID,
    *,
    engine: ReconciliationEngine | None = None,
) -> StatusReport:
    """Reconcile one document with the provider and report its workflow position."""

    effective_engine = engine or build_engine()
    log.info("Checking status of document %s", document_id)
    report = check_status(effective_engine, document_id)
    log.info(
        "Document %s is %s (%s); %d transition(s)%s",
        document_id,
        report.document.status,
        report.flow,
        len(report.transitions),
        " [stale]" if report.stale else "",
    )
    return report


def remind_document_signers(
    document_id: UUID,
    *,
    engine: ReconciliationEngine | None = None,
    dispatcher: ReminderDispatcher | None = None,
    cooldown: timedelta | None = None,
    urgency: ReminderUrgency = ReminderUrgency.NORMAL,
    message: str | None = None,
) -> ReminderOutcome:
    """Sync one document and remind whoever is expected to act next."""

    effective_engine = engine or build_engine()
    effective_cooldown = (
        cooldown if cooldown is not None else get_workflow_config().reminder_cooldown
    )
    log.info(
        "Sending reminders for document %s: urgency=%s, cooldown=%s",
        document_id,
        urgency,
        effective_cooldown,
    )
    outcome = send_reminders(
        effective_engine,
        dispatcher or AdobeSignReminderDispatcher(),
        document_id,
        cooldown=effective_cooldown,
        urgency=urgency,
        message=message,
    )
    log.info(
        "Finished reminders for document %s: delivered=%d, failed=%d",
        document_id,
        len(outcome.delivered),
        len(outcome.failed),
    )
    return outcome
