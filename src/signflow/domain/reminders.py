"""Reminder target selection, cadence and wording."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Final

from signflow.common.clock import as_utc
from signflow.domain.model import ReminderKind, ReminderUrgency, SigningFlow
from signflow.domain.reconciliation.ordering import classify

if TYPE_CHECKING:
    from datetime import datetime

    from signflow.domain.model import Document, Recipient

log = logging.getLogger(__name__)

DEFAULT_COOLDOWN: Final = timedelta(minutes=60)

INITIAL_INTERVAL: Final = timedelta(hours=24)
FOLLOW_UP_INTERVAL: Final = timedelta(hours=72)
URGENT_INTERVAL: Final = timedelta(hours=168)
FINAL_INTERVAL: Final = timedelta(hours=336)

_SCHEDULES: Final[dict[tuple[SigningFlow, ReminderUrgency], tuple[timedelta, ...]]] = {
    (SigningFlow.SEQUENTIAL, ReminderUrgency.LOW): (FOLLOW_UP_INTERVAL, URGENT_INTERVAL),
    (SigningFlow.SEQUENTIAL, ReminderUrgency.NORMAL): (INITIAL_INTERVAL, FOLLOW_UP_INTERVAL),
    (SigningFlow.SEQUENTIAL, ReminderUrgency.HIGH): (
        INITIAL_INTERVAL / 2,
        INITIAL_INTERVAL,
        FOLLOW_UP_INTERVAL,
    ),
    (SigningFlow.SEQUENTIAL, ReminderUrgency.CRITICAL): (
        timedelta(hours=4),
        INITIAL_INTERVAL / 2,
        INITIAL_INTERVAL,
    ),
    (SigningFlow.PARALLEL, ReminderUrgency.LOW): (
        FOLLOW_UP_INTERVAL,
        URGENT_INTERVAL,
        FINAL_INTERVAL,
    ),
    (SigningFlow.PARALLEL, ReminderUrgency.NORMAL): (
        INITIAL_INTERVAL,
        FOLLOW_UP_INTERVAL,
        URGENT_INTERVAL,
    ),
    (SigningFlow.PARALLEL, ReminderUrgency.HIGH): (
        INITIAL_INTERVAL,
        FOLLOW_UP_INTERVAL,
        URGENT_INTERVAL,
    ),
    (SigningFlow.PARALLEL, ReminderUrgency.CRITICAL): (
        timedelta(hours=8),
        INITIAL_INTERVAL,
        FOLLOW_UP_INTERVAL,
    ),
}

_NOTES: Final = {
    ReminderKind.INITIAL: (
        "This is a friendly reminder that your signature is needed on an important document."
    ),
    ReminderKind.FOLLOW_UP: (
        "We noticed you haven't had a chance to sign the document yet. "
        "Please take a moment to review and sign when convenient."
    ),
    ReminderKind.REMINDER: (
        "Your signature is still needed to complete this document. "
        "Please sign at your earliest convenience."
    ),
    ReminderKind.FINAL: (
        "This is the final reminder - your signature is urgently needed "
        "to complete this important document."
    ),
}
_FLOW_CONTEXT: Final = {
    SigningFlow.SEQUENTIAL: " You are currently the next person in the signing sequence.",
    SigningFlow.PARALLEL: " Multiple signatures are being collected simultaneously.",
}


def _in_cooldown(recipient: Recipient, *, now: datetime, cooldown: timedelta) -> bool:
    if recipient.last_reminder_sent is None:
        return False
    return as_utc(now) - as_utc(recipient.last_reminder_sent) < cooldown


def select_reminder_targets(
    document: Document,
    *,
    now: datetime,
    cooldown: timedelta = DEFAULT_COOLDOWN,
) -> tuple[Recipient, ...]:
    """Return the current signers of ``document`` who may be reminded at ``now``.

    An empty result is a normal outcome (everyone signed, nobody's turn, or
    everyone was reminded recently).
    """

    if document.status.is_terminal:
        log.debug("Document %s is %s; no reminder targets", document.id, document.status)
        return ()
    if not document.transmitted:
        log.debug("Document %s not transmitted; no reminder targets", document.id)
        return ()

    current = classify(document.recipients, flow=document.signing_flow).current_signers
    targets = tuple(
        recipient
        for recipient in current
        if not recipient.state.is_terminal
        and not _in_cooldown(recipient, now=now, cooldown=cooldown)
    )
    skipped = len(current) - len(targets)
    if skipped:
        log.info(
            "Skipped %d recipient(s) of document %s in reminder cooldown", skipped, document.id
        )
    return targets


def reminder_schedule(
    flow: SigningFlow, urgency: ReminderUrgency = ReminderUrgency.NORMAL
) -> tuple[timedelta, ...]:
    """Intervals between successive reminders for ``flow`` at ``urgency``."""
    return _SCHEDULES[flow, urgency]


def reminder_kind(sent_count: int, total: int) -> ReminderKind:
    """Kind of the reminder at zero-based position ``sent_count`` in a schedule of ``total``."""

    if total < 1:
        raise ValueError("total must be >= 1")
    index = min(max(sent_count, 0), total - 1)
    if index == 0:
        return ReminderKind.INITIAL
    if index == total - 1:
        return ReminderKind.FINAL
    if index == 1:
        return ReminderKind.FOLLOW_UP
    return ReminderKind.REMINDER


def compose_reminder_note(kind: ReminderKind, flow: SigningFlow) -> str:
    """Plain-text note attached to the provider reminder."""
    return _NOTES[kind] + _FLOW_CONTEXT[flow]
