"""Signature workflow domain model."""

from __future__ import annotations

from .document import Document, Recipient, email_key, new_id
from .enums import (
    ACTIONABLE_RECIPIENT_STATES,
    TERMINAL_DOCUMENT_STATUSES,
    TERMINAL_RECIPIENT_STATES,
    DocumentStatus,
    RecipientState,
    ReminderKind,
    ReminderUrgency,
    SigningFlow,
)

__all__ = [
    "ACTIONABLE_RECIPIENT_STATES",
    "TERMINAL_DOCUMENT_STATUSES",
    "TERMINAL_RECIPIENT_STATES",
    "Document",
    "DocumentStatus",
    "Recipient",
    "RecipientState",
    "ReminderKind",
    "ReminderUrgency",
    "SigningFlow",
    "email_key",
    "new_id",
]
