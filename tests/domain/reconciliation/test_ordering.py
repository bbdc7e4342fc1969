from __future__ import annotations

import logging

import pytest

from signflow.domain.model import RecipientState, SigningFlow
from signflow.domain.reconciliation import classify, derive_flow, stages
from tests.support.documents import make_document


def _emails(recipients: tuple[object, ...]) -> list[str]:
    return [recipient.email for recipient in recipients]  # type: ignore[attr-defined]


def test_distinct_orders_derive_sequential_flow() -> None:
    document = make_document(("a@example.com", 1), ("b@example.com", 2))

    assert derive_flow(document.recipients) is SigningFlow.SEQUENTIAL


def test_shared_order_derives_parallel_flow() -> None:
    document = make_document(("a@example.com", 1), ("b@example.com", 1))

    assert derive_flow(document.recipients) is SigningFlow.PARALLEL


def test_single_and_empty_recipient_lists_are_sequential() -> None:
    assert derive_flow(make_document(("a@example.com", 1)).recipients) is SigningFlow.SEQUENTIAL
    assert derive_flow(()) is SigningFlow.SEQUENTIAL


def test_stages_group_by_order_and_keep_insertion_order() -> None:
    document = make_document(("c@example.com", 2), ("a@example.com", 1), ("b@example.com", 2))

    grouped = stages(document.recipients)

    assert [_emails(stage) for stage in grouped] == [
        ["a@example.com"],
        ["c@example.com", "b@example.com"],
    ]


def test_sequential_current_signer_is_first_open_stage() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SIGNED),
        ("b@example.com", 2, RecipientState.SENT),
        ("c@example.com", 3, RecipientState.PENDING),
    )

    order = classify(document.recipients)

    assert order.flow is SigningFlow.SEQUENTIAL
    assert _emails(order.current_signers) == ["b@example.com"]


def test_sequential_flow_skips_waiting_recipients() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.WAITING),
        ("b@example.com", 2, RecipientState.VIEWED),
    )

    assert _emails(classify(document.recipients).current_signers) == ["b@example.com"]


def test_sequential_flow_with_only_waiting_recipients_has_no_signer(
    caplog: pytest.LogCaptureFixture,
) -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SIGNED),
        ("b@example.com", 2, RecipientState.WAITING),
    )

    with caplog.at_level(logging.WARNING):
        order = classify(document.recipients)

    assert order.current_signers == ()
    assert "b@example.com" in caplog.text


def test_sequential_stage_with_shared_order_signs_together() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SIGNED),
        ("b@example.com", 2, RecipientState.SENT),
        ("c@example.com", 2, RecipientState.SENT),
        ("d@example.com", 3, RecipientState.PENDING),
    )

    order = classify(document.recipients, flow=SigningFlow.SEQUENTIAL)

    assert _emails(order.current_signers) == ["b@example.com", "c@example.com"]


def test_parallel_flow_returns_every_actionable_recipient() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SIGNED),
        ("b@example.com", 1, RecipientState.VIEWED),
        ("c@example.com", 1, RecipientState.SENT),
        ("d@example.com", 1, RecipientState.WAITING),
    )

    order = classify(document.recipients)

    assert order.flow is SigningFlow.PARALLEL
    assert _emails(order.current_signers) == ["b@example.com", "c@example.com"]


def test_explicit_flow_overrides_derived_flow() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SENT),
        ("b@example.com", 2, RecipientState.SENT),
    )

    order = classify(document.recipients, flow=SigningFlow.PARALLEL)

    assert order.flow is SigningFlow.PARALLEL
    assert _emails(order.current_signers) == ["a@example.com", "b@example.com"]


def test_fully_signed_sequence_has_no_current_signer() -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SIGNED),
        ("b@example.com", 2, RecipientState.SIGNED),
    )

    assert classify(document.recipients).current_signers == ()
