from __future__ import annotations

from datetime import timedelta

import pytest

from signflow import main as main_module
from signflow.domain.model import RecipientState, ReminderKind, ReminderUrgency, SigningFlow
from signflow.domain.workflow import ReminderOutcome, StatusReport
from tests.support.documents import make_document

DOCUMENT_ID = "0b7ad3c2-3f0e-4c55-9a57-1f5f7c0de001"


def test_status_command_prints_current_signers(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    document = make_document(
        ("a@example.com", 1, RecipientState.SIGNED), ("b@example.com", 2, RecipientState.SENT)
    )
    captured: dict[str, object] = {}

    def fake_check(document_id: object, **kwargs: object) -> StatusReport:
        captured["document_id"] = document_id
        captured.update(kwargs)
        return StatusReport(
            document=document,
            flow=SigningFlow.SEQUENTIAL,
            current_signers=(document.recipients[1],),
        )

    monkeypatch.setattr(main_module, "check_document_status", fake_check)

    main_module.main(["status", DOCUMENT_ID])

    assert str(captured["document_id"]) == DOCUMENT_ID
    out = capsys.readouterr().out
    assert "sent_for_signature (sequential)" in out
    assert " * [2] b@example.com: sent" in out
    assert "   [1] a@example.com: signed" in out


def test_remind_command_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_remind(document_id: object, **kwargs: object) -> ReminderOutcome:
        captured["document_id"] = document_id
        captured.update(kwargs)
        return ReminderOutcome(document=make_document())

    monkeypatch.setattr(main_module, "remind_document_signers", fake_remind)

    main_module.main(["remind", DOCUMENT_ID])

    assert captured["cooldown"] is None
    assert captured["urgency"] is ReminderUrgency.NORMAL
    assert captured["message"] is None


def test_remind_command_with_flags(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}
    document = make_document(("a@example.com", 1, RecipientState.SENT))

    def fake_remind(document_id: object, **kwargs: object) -> ReminderOutcome:
        captured.update(kwargs)
        return ReminderOutcome(
            document=document,
            targets=document.recipients,
            delivered=("a@example.com",),
            kind=ReminderKind.FOLLOW_UP,
        )

    monkeypatch.setattr(main_module, "remind_document_signers", fake_remind)

    main_module.main(
        [
            "-v",
            "remind",
            DOCUMENT_ID,
            "--cooldown-minutes",
            "15",
            "--urgency",
            "high",
            "--message",
            "Friendly nudge",
        ]
    )

    assert captured["cooldown"] == timedelta(minutes=15)
    assert captured["urgency"] is ReminderUrgency.HIGH
    assert captured["message"] == "Friendly nudge"
    assert "Sent follow_up reminder to 1 recipient(s)." in capsys.readouterr().out


def test_failed_reminders_exit_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    document = make_document(("a@example.com", 1, RecipientState.SENT))

    def fake_remind(*_: object, **__: object) -> ReminderOutcome:
        return ReminderOutcome(
            document=document, targets=document.recipients, failed=("a@example.com",)
        )

    monkeypatch.setattr(main_module, "remind_document_signers", fake_remind)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["remind", DOCUMENT_ID])

    assert excinfo.value.code == 1


@pytest.mark.parametrize(
    "argv",
    [
        ["status", "not-a-uuid"],
        ["remind", DOCUMENT_ID, "--cooldown-minutes", "-5"],
        ["remind", DOCUMENT_ID, "--urgency", "whenever"],
        ["unknown"],
        [],
    ],
)
def test_usage_errors_exit_with_code_two(
    argv: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(argv)

    assert excinfo.value.code == 2  # noqa: PLR2004
    assert capsys.readouterr().err.startswith("Error: ")


def test_runtime_errors_exit_with_code_one(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def fake_check(*_: object, **__: object) -> StatusReport:
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(main_module, "check_document_status", fake_check)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["status", DOCUMENT_ID])

    assert excinfo.value.code == 1
    assert "Error: database unavailable" in capsys.readouterr().err
