"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RecipientState(StrEnum):
    """Canonical per-recipient signing state."""

    PENDING = "pending"
    SENT = "sent"
    VIEWED = "viewed"
    WAITING = "waiting"
    SIGNED = "signed"
    DECLINED = "declined"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_RECIPIENT_STATES

    @property
    def is_actionable(self) -> bool:
        """Whether a recipient in this state can act on the document right now."""
        return self in ACTIONABLE_RECIPIENT_STATES


TERMINAL_RECIPIENT_STATES = frozenset(
    {RecipientState.SIGNED, RecipientState.DECLINED, RecipientState.EXPIRED}
)
ACTIONABLE_RECIPIENT_STATES = frozenset(
    {RecipientState.PENDING, RecipientState.SENT, RecipientState.VIEWED}
)


class DocumentStatus(StrEnum):
    """Lifecycle status of a document as seen by the surrounding service."""

    UPLOADED = "uploaded"
    READY_FOR_SIGNATURE = "ready_for_signature"
    SENT_FOR_SIGNATURE = "sent_for_signature"
    PARTIALLY_SIGNED = "partially_signed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    SIGNATURE_ERROR = "signature_error"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_DOCUMENT_STATUSES


TERMINAL_DOCUMENT_STATUSES = frozenset(
    {DocumentStatus.COMPLETED, DocumentStatus.CANCELLED, DocumentStatus.EXPIRED}
)


class SigningFlow(StrEnum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class ReminderUrgency(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class ReminderKind(StrEnum):
    INITIAL = "initial"
    FOLLOW_UP = "follow_up"
    REMINDER = "reminder"
    FINAL = "final"
