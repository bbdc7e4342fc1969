from __future__ import annotations

from dataclasses import replace
from uuid import UUID  # noqa: TC003

import pytest

from signflow.domain.errors import ReconciliationInvariantError
from signflow.domain.model import DocumentStatus, RecipientState, SigningFlow, new_id
from signflow.domain.reconciliation import (
    ReconciliationPlan,
    RecipientUpdate,
    apply_plan,
    mark_expired,
)
from tests.support.documents import make_document
from tests.support.fakes import FIXED_NOW


def _plan(document_id: UUID, *updates: RecipientUpdate, **overrides: object) -> ReconciliationPlan:
    values: dict[str, object] = {
        "document_id": document_id,
        "flow": SigningFlow.SEQUENTIAL,
        "previous_status": DocumentStatus.SENT_FOR_SIGNATURE,
        "status": DocumentStatus.SENT_FOR_SIGNATURE,
        "recipient_updates": updates,
    }
    values.update(overrides)
    return ReconciliationPlan(**values)  # type: ignore[arg-type]


def test_apply_plan_updates_recipients_and_status() -> None:
    document = make_document(("a@example.com", 1, RecipientState.SENT), ("b@example.com", 2))
    first, second = document.recipients
    update = RecipientUpdate(
        recipient_id=first.id,
        email=first.email,
        previous_state=RecipientState.SENT,
        state=RecipientState.SIGNED,
        signed_at=FIXED_NOW,
        signing_url="https://sign.example/a",
    )
    plan = _plan(
        document.id,
        update,
        status=DocumentStatus.PARTIALLY_SIGNED,
        current_signer_ids=(second.id,),
    )

    result = apply_plan(document, plan)

    assert first.state is RecipientState.SIGNED
    assert first.signed_at == FIXED_NOW
    assert first.signing_url == "https://sign.example/a"
    assert document.status is DocumentStatus.PARTIALLY_SIGNED
    assert result.current_signers == (second,)
    assert result.status is DocumentStatus.PARTIALLY_SIGNED


def test_apply_plan_keeps_existing_signed_at() -> None:
    document = make_document(("a@example.com", 1, RecipientState.SIGNED))
    (recipient,) = document.recipients
    earlier = FIXED_NOW.replace(year=2024)
    recipient.signed_at = earlier
    update = RecipientUpdate(
        recipient_id=recipient.id,
        email=recipient.email,
        previous_state=RecipientState.SIGNED,
        state=RecipientState.SIGNED,
        signed_at=FIXED_NOW,
    )

    apply_plan(document, _plan(document.id, update))

    assert recipient.signed_at == earlier


def test_rejected_plan_leaves_document_untouched() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SENT),
        ("b@example.com", 2, RecipientState.SIGNED),
    )
    first, second = document.recipients
    good = RecipientUpdate(
        recipient_id=first.id,
        email=first.email,
        previous_state=RecipientState.SENT,
        state=RecipientState.VIEWED,
    )
    regression = RecipientUpdate(
        recipient_id=second.id,
        email=second.email,
        previous_state=RecipientState.SIGNED,
        state=RecipientState.SENT,
    )

    with pytest.raises(ReconciliationInvariantError):
        apply_plan(document, _plan(document.id, good, regression))

    assert first.state is RecipientState.SENT
    assert second.state is RecipientState.SIGNED


def test_stale_plan_is_rejected() -> None:
    document = make_document(("a@example.com", 1, RecipientState.VIEWED))
    (recipient,) = document.recipients
    update = RecipientUpdate(
        recipient_id=recipient.id,
        email=recipient.email,
        previous_state=RecipientState.SENT,
        state=RecipientState.VIEWED,
    )

    with pytest.raises(ReconciliationInvariantError):
        apply_plan(document, _plan(document.id, update))


def test_plan_for_other_document_is_rejected() -> None:
    document = make_document(("a@example.com", 1))

    with pytest.raises(ReconciliationInvariantError):
        apply_plan(document, _plan(new_id()))


def test_update_for_unknown_recipient_is_rejected() -> None:
    document = make_document(("a@example.com", 1))
    update = RecipientUpdate(
        recipient_id=new_id(),
        email="ghost@example.com",
        previous_state=RecipientState.PENDING,
        state=RecipientState.SENT,
    )

    with pytest.raises(ReconciliationInvariantError):
        apply_plan(document, _plan(document.id, update))


def test_terminal_document_status_cannot_change() -> None:
    document = make_document(("a@example.com", 1), status=DocumentStatus.CANCELLED)
    plan = _plan(
        document.id,
        previous_status=DocumentStatus.CANCELLED,
        status=DocumentStatus.SENT_FOR_SIGNATURE,
    )

    with pytest.raises(ReconciliationInvariantError):
        apply_plan(document, plan)


def test_completed_at_is_set_once() -> None:
    document = make_document(("a@example.com", 1, RecipientState.SIGNED))
    plan = _plan(document.id, status=DocumentStatus.COMPLETED, completed_at=FIXED_NOW)

    apply_plan(document, plan)
    apply_plan(
        document,
        replace(
            plan,
            previous_status=DocumentStatus.COMPLETED,
            completed_at=FIXED_NOW.replace(year=2030),
        ),
    )

    assert document.completed_at == FIXED_NOW


def test_mark_expired_skips_terminal_documents() -> None:
    open_document = make_document(("a@example.com", 1))
    done_document = make_document(("a@example.com", 1), status=DocumentStatus.COMPLETED)

    assert mark_expired(open_document, "gone") is True
    assert open_document.status is DocumentStatus.EXPIRED
    assert open_document.status_reason == "gone"
    assert mark_expired(done_document, "gone") is False
    assert done_document.status is DocumentStatus.COMPLETED
