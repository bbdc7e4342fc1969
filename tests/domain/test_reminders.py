from __future__ import annotations

from datetime import timedelta

import pytest

from signflow.domain.model import (
    DocumentStatus,
    RecipientState,
    ReminderKind,
    ReminderUrgency,
    SigningFlow,
)
from signflow.domain.reminders import (
    compose_reminder_note,
    reminder_kind,
    reminder_schedule,
    select_reminder_targets,
)
from tests.support.documents import make_document
from tests.support.fakes import FIXED_NOW


def _emails(recipients: tuple[object, ...]) -> list[str]:
    return [recipient.email for recipient in recipients]  # type: ignore[attr-defined]


def test_sequential_flow_targets_exactly_the_next_signer() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SIGNED),
        ("b@example.com", 2, RecipientState.SENT),
        ("c@example.com", 3, RecipientState.WAITING),
    )

    targets = select_reminder_targets(document, now=FIXED_NOW)

    assert _emails(targets) == ["b@example.com"]


def test_parallel_flow_targets_every_open_recipient() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SENT),
        ("b@example.com", 1, RecipientState.VIEWED),
        ("c@example.com", 1, RecipientState.SIGNED),
    )

    targets = select_reminder_targets(document, now=FIXED_NOW)

    assert _emails(targets) == ["a@example.com", "b@example.com"]


def test_recently_reminded_recipients_are_skipped() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SENT),
        ("b@example.com", 1, RecipientState.SENT),
    )
    first, second = document.recipients
    first.last_reminder_sent = FIXED_NOW - timedelta(minutes=10)
    second.last_reminder_sent = FIXED_NOW - timedelta(hours=2)

    targets = select_reminder_targets(document, now=FIXED_NOW, cooldown=timedelta(hours=1))

    assert targets == (second,)


def test_naive_reminder_timestamps_are_treated_as_utc() -> None:
    document = make_document(("a@example.com", 1, RecipientState.SENT))
    (recipient,) = document.recipients
    recipient.last_reminder_sent = (FIXED_NOW - timedelta(minutes=5)).replace(tzinfo=None)

    assert select_reminder_targets(document, now=FIXED_NOW) == ()


@pytest.mark.parametrize(
    "status",
    [DocumentStatus.COMPLETED, DocumentStatus.CANCELLED, DocumentStatus.EXPIRED],
)
def test_terminal_documents_have_no_targets(status: DocumentStatus) -> None:
    document = make_document(("a@example.com", 1, RecipientState.SENT), status=status)

    assert select_reminder_targets(document, now=FIXED_NOW) == ()


def test_untransmitted_documents_have_no_targets() -> None:
    document = make_document(("a@example.com", 1), agreement_id=None)

    assert select_reminder_targets(document, now=FIXED_NOW) == ()


def test_everyone_signed_is_an_empty_selection() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SIGNED),
        ("b@example.com", 2, RecipientState.SIGNED),
    )

    assert select_reminder_targets(document, now=FIXED_NOW) == ()


def test_reminder_schedules_depend_on_flow_and_urgency() -> None:
    assert reminder_schedule(SigningFlow.SEQUENTIAL) == (timedelta(hours=24), timedelta(hours=72))
    assert reminder_schedule(SigningFlow.PARALLEL, ReminderUrgency.CRITICAL) == (
        timedelta(hours=8),
        timedelta(hours=24),
        timedelta(hours=72),
    )
    assert reminder_schedule(SigningFlow.SEQUENTIAL, ReminderUrgency.CRITICAL)[0] == timedelta(
        hours=4
    )


@pytest.mark.parametrize(
    ("sent", "total", "expected"),
    [
        (0, 3, ReminderKind.INITIAL),
        (1, 3, ReminderKind.FOLLOW_UP),
        (2, 3, ReminderKind.FINAL),
        (7, 3, ReminderKind.FINAL),
        (2, 4, ReminderKind.REMINDER),
        (0, 1, ReminderKind.INITIAL),
    ],
)
def test_reminder_kind_by_position(sent: int, total: int, expected: ReminderKind) -> None:
    assert reminder_kind(sent, total) is expected


def test_reminder_kind_requires_a_schedule() -> None:
    with pytest.raises(ValueError, match="total"):
        reminder_kind(0, 0)


def test_reminder_note_mentions_flow_context() -> None:
    sequential = compose_reminder_note(ReminderKind.INITIAL, SigningFlow.SEQUENTIAL)
    parallel = compose_reminder_note(ReminderKind.FINAL, SigningFlow.PARALLEL)

    assert "next person in the signing sequence" in sequential
    assert parallel.startswith("This is the final reminder")
    assert "simultaneously" in parallel
