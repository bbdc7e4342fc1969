#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from signflow.app import check_document_status, remind_document_signers
from signflow.common.logging import configure_logging
from signflow.domain.model import ReminderUrgency

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from signflow.domain.workflow import ReminderOutcome, StatusReport


class _ArgumentParser(argparse.ArgumentParser):
    """Raise instead of exiting so usage errors share one exit path."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise ValueError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="signflow",
        description="Reconcile signature workflows with Adobe Sign and remind signers",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    status = commands.add_parser("status", help="Sync a document and show who must act next")
    status.add_argument("document_id", help="Document UUID")

    remind = commands.add_parser("remind", help="Sync a document and remind its current signers")
    remind.add_argument("document_id", help="Document UUID")
    remind.add_argument(
        "--cooldown-minutes",
        type=int,
        help="Skip recipients reminded within this many minutes (default: from environment)",
    )
    remind.add_argument(
        "--urgency",
        choices=[urgency.value for urgency in ReminderUrgency],
        default=ReminderUrgency.NORMAL.value,
        help="Reminder urgency (default: %(default)s)",
    )
    remind.add_argument("--message", help="Custom reminder text instead of the standard note")
    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    args = _build_parser().parse_args(list(argv))
    try:
        args.document_id = UUID(args.document_id)
    except ValueError as exc:
        raise ValueError(f"Invalid document id: {args.document_id}") from exc
    cooldown_minutes = getattr(args, "cooldown_minutes", None)
    if cooldown_minutes is not None and cooldown_minutes < 0:
        raise ValueError("Cooldown minutes must be non-negative")
    return args


def _print_status(report: StatusReport) -> None:
    document = report.document
    print(f"Document {document.id}: {document.status.value} ({report.flow.value})")
    if report.stale:
        print("Provider unreachable; showing last known state.")
    if document.status_reason:
        print(f"Reason: {document.status_reason}")
    for transition in report.transitions:
        print(f"  {transition.subject}: {transition.previous} -> {transition.current}")
    for recipient in document.recipients:
        marker = "*" if recipient in report.current_signers else " "
        print(f" {marker} [{recipient.order}] {recipient.email}: {recipient.state.value}")


def _print_reminders(outcome: ReminderOutcome) -> None:
    if not outcome.synced:
        print("Provider unreachable; reminders selected from last known state.")
    if not outcome.targets:
        print(f"No reminders due for document {outcome.document.id}.")
        return
    kind = outcome.kind.value if outcome.kind is not None else "reminder"
    print(f"Sent {kind} reminder to {len(outcome.delivered)} recipient(s).")
    for email in outcome.delivered:
        print(f"  delivered: {email}")
    for email in outcome.failed:
        print(f"  failed: {email}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    try:
        args = _parse_args(sys.argv[1:] if argv is None else argv)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command == "status":
            _print_status(check_document_status(args.document_id))
            return
        cooldown = (
            timedelta(minutes=args.cooldown_minutes) if args.cooldown_minutes is not None else None
        )
        outcome = remind_document_signers(
            args.document_id,
            cooldown=cooldown,
            urgency=ReminderUrgency(args.urgency),
            message=args.message,
        )
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    _print_reminders(outcome)
    if outcome.failed:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
