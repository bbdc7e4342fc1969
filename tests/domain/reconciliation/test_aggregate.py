from __future__ import annotations

import pytest

from signflow.domain.model import DocumentStatus, RecipientState, SigningFlow
from signflow.domain.reconciliation import aggregate_status
from tests.support.documents import make_document


def _status(
    *states: RecipientState,
    flow: SigningFlow = SigningFlow.PARALLEL,
    transmitted: bool = True,
    agreement_status: str | None = None,
) -> DocumentStatus:
    order = 1
    recipients = []
    for index, state in enumerate(states):
        if flow is SigningFlow.SEQUENTIAL:
            order = index + 1
        recipients.append((f"r{index}@example.com", order, state))
    document = make_document(*recipients)
    return aggregate_status(
        document.recipients,
        flow=flow,
        transmitted=transmitted,
        agreement_status=agreement_status,
    )


def test_all_signed_is_completed() -> None:
    assert _status(RecipientState.SIGNED, RecipientState.SIGNED) is DocumentStatus.COMPLETED


def test_some_signed_is_partially_signed() -> None:
    status = _status(RecipientState.SIGNED, RecipientState.SENT)

    assert status is DocumentStatus.PARTIALLY_SIGNED


def test_nobody_signed_on_transmitted_document_is_sent_for_signature() -> None:
    status = _status(RecipientState.SENT, RecipientState.VIEWED)

    assert status is DocumentStatus.SENT_FOR_SIGNATURE


def test_untransmitted_document_is_ready_for_signature() -> None:
    status = _status(RecipientState.PENDING, transmitted=False)

    assert status is DocumentStatus.READY_FOR_SIGNATURE


def test_any_decline_cancels_even_when_others_signed() -> None:
    status = _status(RecipientState.SIGNED, RecipientState.DECLINED)

    assert status is DocumentStatus.CANCELLED


def test_expiry_in_sequential_flow_expires_document() -> None:
    status = _status(
        RecipientState.SIGNED,
        RecipientState.EXPIRED,
        RecipientState.PENDING,
        flow=SigningFlow.SEQUENTIAL,
    )

    assert status is DocumentStatus.EXPIRED


def test_expiry_in_parallel_flow_waits_for_actionable_recipients() -> None:
    still_open = _status(RecipientState.EXPIRED, RecipientState.SENT)
    nobody_left = _status(RecipientState.EXPIRED, RecipientState.SIGNED)

    assert still_open is DocumentStatus.SENT_FOR_SIGNATURE
    assert nobody_left is DocumentStatus.EXPIRED


@pytest.mark.parametrize(
    ("agreement_status", "expected"),
    [
        ("CANCELLED", DocumentStatus.CANCELLED),
        ("RECALLED", DocumentStatus.CANCELLED),
        ("EXPIRED", DocumentStatus.EXPIRED),
    ],
)
def test_agreement_level_outcome_wins(agreement_status: str, expected: DocumentStatus) -> None:
    status = _status(
        RecipientState.SIGNED, RecipientState.SIGNED, agreement_status=agreement_status
    )

    assert status is expected
