"""Reminder delivery through the Adobe Sign reminders endpoint."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from signflow.adapters.http_resilience import ResilientClient
from signflow.config.adobe_sign import get_adobe_sign_config
from signflow.domain.errors import AgreementNotFound, ProviderError
from signflow.domain.model import email_key
from signflow.domain.ports.notification import DispatchResult, ReminderDispatcher
from signflow.domain.reconciliation.locate import locate_participants

from .client import agreement_path, request_headers, request_json
from .schema import ReminderCreationResult, ReminderRequest

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from signflow.config.adobe_sign import AdobeSignConfig
    from signflow.config.http_resilience import ResilienceConfig
    from signflow.domain.model import Recipient

log = getLogger(__name__)


@dataclass(slots=True)
class AdobeSignReminderDispatcher:
    """Resolve participant ids from the members endpoint and post one reminder."""

    config: AdobeSignConfig = field(default_factory=get_adobe_sign_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(default=ResilientClient)

    def __call__(
        self,
        *,
        agreement_id: str,
        recipients: Sequence[Recipient],
        message: str,
    ) -> DispatchResult:
        emails = tuple(recipient.email for recipient in recipients)
        if not emails:
            return DispatchResult()
        try:
            return asyncio.run(self._dispatch(agreement_id, emails, message))
        except AgreementNotFound:
            raise
        except ProviderError as exc:
            log.warning("Reminder for agreement %s not sent: %s", agreement_id, exc)
            return DispatchResult(failed=emails)

    async def _dispatch(
        self, agreement_id: str, emails: tuple[str, ...], message: str
    ) -> DispatchResult:
        headers = request_headers(self.config)
        async with self.client_factory(self.config.resilience) as client:
            members = await request_json(
                client,
                "GET",
                agreement_path(agreement_id, "members"),
                agreement_id=agreement_id,
                headers=headers,
            )
            ids_by_email = _participant_ids(members)

            resolved = tuple(email for email in emails if email_key(email) in ids_by_email)
            unresolved = tuple(email for email in emails if email_key(email) not in ids_by_email)
            if unresolved:
                log.warning(
                    "No Adobe Sign participant id for %s on agreement %s",
                    ", ".join(unresolved),
                    agreement_id,
                )
            if not resolved:
                return DispatchResult(failed=unresolved)

            request = ReminderRequest(
                recipient_participant_ids=[ids_by_email[email_key(email)] for email in resolved],
                note=message,
            )
            payload = await request_json(
                client,
                "POST",
                agreement_path(agreement_id, "reminders"),
                agreement_id=agreement_id,
                headers={**headers, "Content-Type": "application/json"},
                json=request.to_payload(),
            )

        created = ReminderCreationResult.model_validate(payload or {})
        log.info(
            "Reminder %s sent for agreement %s to %s",
            created.id or "(no id)",
            agreement_id,
            ", ".join(resolved),
        )
        return DispatchResult(delivered=resolved, failed=unresolved)


def _participant_ids(members: object) -> dict[str, str]:
    if not isinstance(members, dict):
        return {}
    payload: Mapping[str, object] = {"participants": members}
    return {
        email_key(entry.email): entry.participant_id
        for entry in locate_participants(payload)
        if entry.participant_id is not None
    }


if TYPE_CHECKING:
    _dispatcher_check: ReminderDispatcher = AdobeSignReminderDispatcher()
