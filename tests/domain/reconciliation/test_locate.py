from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from signflow.domain.reconciliation import locate_participants, locate_signing_urls
from tests.support.documents import agreement_payload, member, participant_set


def test_participant_sets_are_flattened_with_set_order() -> None:
    payload = agreement_payload(
        participant_set(member("a@example.com", "COMPLETED"), status="COMPLETED", order=1),
        participant_set(member("b@example.com", None), status="WAITING_FOR_MY_SIGNATURE", order=2),
    )

    entries = locate_participants(payload)

    assert [(entry.email, entry.status, entry.order) for entry in entries] == [
        ("a@example.com", "COMPLETED", 1),
        ("b@example.com", "WAITING_FOR_MY_SIGNATURE", 2),
    ]
    assert entries[1].participant_set_status == "WAITING_FOR_MY_SIGNATURE"


def test_set_order_defaults_to_position() -> None:
    payload = {
        "participantSetsInfo": [
            {"memberInfos": [{"email": "a@example.com", "status": "ACTIVE"}]},
            {"memberInfos": [{"email": "b@example.com", "status": "ACTIVE"}]},
        ]
    }

    entries = locate_participants(payload)

    assert [entry.order for entry in entries] == [1, 2]


def test_nested_participant_sets_under_participants() -> None:
    payload = {
        "participants": {
            "participantSets": [
                {"members": [{"email": "a@example.com", "status": "SIGNED", "id": "p-1"}]}
            ]
        }
    }

    (entry,) = locate_participants(payload)

    assert entry.email == "a@example.com"
    assert entry.participant_id == "p-1"


def test_flat_participant_list() -> None:
    payload = {
        "participants": [
            {"email": "a@example.com", "status": "SIGNED", "order": 1},
            {"email": "b@example.com", "status": "ACTIVE", "order": 1},
        ]
    }

    entries = locate_participants(payload)

    assert [entry.email for entry in entries] == ["a@example.com", "b@example.com"]
    assert {entry.order for entry in entries} == {1}


def test_single_participant_set() -> None:
    payload = {"participantSet": {"memberInfos": [{"email": "a@example.com"}], "status": "ACTIVE"}}

    (entry,) = locate_participants(payload)

    assert entry.status == "ACTIVE"


def test_members_under_participants() -> None:
    payload = {"participants": {"members": [{"email": "a@example.com", "status": "VIEWED"}]}}

    (entry,) = locate_participants(payload)

    assert entry.status == "VIEWED"


def test_higher_priority_shape_wins() -> None:
    payload = {
        "participantSets": [{"memberInfos": [{"email": "first@example.com"}]}],
        "participants": [{"email": "second@example.com"}],
    }

    (entry,) = locate_participants(payload)

    assert entry.email == "first@example.com"


def test_empty_shape_falls_through_to_next_locator() -> None:
    payload = {
        "participantSets": [],
        "participants": [{"email": "a@example.com", "status": "ACTIVE"}],
    }

    (entry,) = locate_participants(payload)

    assert entry.email == "a@example.com"


def test_malformed_shape_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    payload = {
        "participantSets": [{"memberInfos": "not-a-list"}],
        "participants": [{"email": "a@example.com", "status": "ACTIVE"}],
    }

    with caplog.at_level(logging.WARNING):
        (entry,) = locate_participants(payload)

    assert entry.email == "a@example.com"
    assert "malformed" in caplog.text


def test_no_participants_returns_empty_tuple() -> None:
    assert locate_participants({"status": "OUT_FOR_SIGNATURE"}) == ()
    assert locate_participants(None) == ()


def test_members_without_email_are_dropped() -> None:
    payload = agreement_payload(
        participant_set({"status": "ACTIVE"}, member("a@example.com", "ACTIVE"))
    )

    assert [entry.email for entry in locate_participants(payload)] == ["a@example.com"]


def test_member_dates_are_read_from_any_alias() -> None:
    payload = agreement_payload(
        participant_set(
            member(
                "a@example.com",
                "COMPLETED",
                dateSigned="2025-03-01T10:00:00Z",
                lastViewedDate="2025-02-28T08:00:00Z",
            )
        )
    )

    (entry,) = locate_participants(payload)

    assert entry.completed_at == datetime(2025, 3, 1, 10, tzinfo=UTC)
    assert entry.accessed_at == datetime(2025, 2, 28, 8, tzinfo=UTC)


def test_blank_member_status_falls_back_to_set_status() -> None:
    payload = agreement_payload(
        participant_set(member("a@example.com", "  "), status="WAITING_FOR_OTHERS")
    )

    (entry,) = locate_participants(payload)

    assert entry.status == "WAITING_FOR_OTHERS"


def test_signing_urls_are_keyed_by_normalised_email() -> None:
    payload = {
        "signingUrlSetInfos": [
            {
                "signingUrls": [
                    {"email": "Signer@Example.com", "esignUrl": "https://sign.example/1"},
                    {"email": "other@example.com"},
                ]
            }
        ]
    }

    assert locate_signing_urls(payload) == {"signer@example.com": "https://sign.example/1"}


def test_malformed_signing_urls_are_ignored() -> None:
    assert locate_signing_urls({"signingUrlSetInfos": "nope"}) == {}
