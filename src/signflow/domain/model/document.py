"""Documents routed for signature and their recipients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from signflow.domain.model.enums import DocumentStatus, RecipientState

if TYPE_CHECKING:
    from datetime import datetime

    from signflow.domain.model.enums import SigningFlow


def new_id() -> UUID:
    return uuid4()


def email_key(email: str) -> str:
    """Case-insensitive comparison key for recipient emails."""
    return email.strip().casefold()


@dataclass(eq=False, kw_only=True)
class Recipient:
    """A party expected to act on a document.

    `order` is the signing position; ties are allowed and mean "same stage".
    State only moves forward through reconciliation.
    """

    id: UUID = field(default_factory=new_id)

    email: str
    name: str | None = None
    order: int = 1

    state: RecipientState = RecipientState.PENDING
    signing_url: str | None = None

    signed_at: datetime | None = None
    last_signing_url_accessed: datetime | None = None
    last_reminder_sent: datetime | None = None

    @property
    def email_key(self) -> str:
        return email_key(self.email)


@dataclass(eq=False, kw_only=True)
class Document:
    """A document routed through the external signature provider.

    `provider_agreement_id` stays `None` until the document has been transmitted.
    """

    id: UUID = field(default_factory=new_id)
    name: str | None = None

    signing_flow: SigningFlow | None = None
    status: DocumentStatus = DocumentStatus.UPLOADED
    status_reason: str | None = None

    provider_agreement_id: str | None = None
    completed_at: datetime | None = None

    last_reminder_sent: datetime | None = None
    reminder_count: int = 0

    _recipients: list[Recipient] = field(default_factory=list["Recipient"], repr=False)

    def __post_init__(self) -> None:
        if self.reminder_count < 0:
            raise ValueError("reminder_count must be >= 0")

    @property
    def recipients(self) -> tuple[Recipient, ...]:
        """Recipients in presentation (insertion) order."""
        return tuple(self._recipients)

    @property
    def transmitted(self) -> bool:
        return self.provider_agreement_id is not None

    def add_recipient(self, *, email: str, name: str | None = None, order: int = 1) -> Recipient:
        if not email.strip():
            raise ValueError("recipient email must not be blank")
        if self.recipient_by_email(email) is not None:
            raise ValueError(f"duplicate recipient email: {email}")
        recipient = Recipient(email=email, name=name, order=order)
        self._recipients.append(recipient)
        return recipient

    def recipient_by_email(self, email: str) -> Recipient | None:
        key = email_key(email)
        for recipient in self._recipients:
            if recipient.email_key == key:
                return recipient
        return None
