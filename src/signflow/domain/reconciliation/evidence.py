"""Corroborating evidence of signing taken from form data and the event log."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Final

from pydantic import Field, ValidationError

from signflow.common.clock import as_utc
from signflow.domain.model import email_key

from .locate import ProviderModel

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)

# Adobe reports signing as ESIGNED, DIGSIGNED, WRITTEN_SIGNED, ACTION_COMPLETED and variants.
SIGN_EVENT_MARKERS: Final = ("SIGNED", "COMPLETED")
VIEW_EVENT_TYPES: Final = frozenset({"EMAIL_VIEWED", "VIEWED", "DOCUMENT_VIEWED"})
SIGNATURE_FIELD_TYPE: Final = "SIGNATURE"


class FormFieldPayload(ProviderModel):
    name: str | None = None
    field_type: str | None = Field(default=None, alias="fieldType")
    value: str | None = None
    assigned_to: str | None = Field(default=None, alias="assignedToRecipient")

    @property
    def is_filled_signature(self) -> bool:
        return (
            (self.field_type or "").upper() == SIGNATURE_FIELD_TYPE
            and self.value is not None
            and bool(self.value.strip())
        )


class EventPayload(ProviderModel):
    type: str
    participant_email: str | None = Field(default=None, alias="participantEmail")
    date: datetime | None = None


@dataclass(slots=True, frozen=True)
class SignEvidence:
    """Evidence collected for a whole agreement, queried per recipient."""

    signature_fields: tuple[FormFieldPayload, ...] = ()
    signed_events: Mapping[str, datetime | None] = field(default_factory=dict)
    viewed_events: Mapping[str, datetime | None] = field(default_factory=dict)

    def has_form_field_signature(self, email: str, order: int) -> bool:
        key = email_key(email)
        marker = re.compile(rf"(?<![0-9a-z])signer{order}(?![0-9])", re.IGNORECASE)
        return any(
            (candidate.assigned_to is not None and email_key(candidate.assigned_to) == key)
            or (candidate.name is not None and marker.search(candidate.name) is not None)
            for candidate in self.signature_fields
        )

    def has_sign_event(self, email: str) -> bool:
        return email_key(email) in self.signed_events

    def signed_event_at(self, email: str) -> datetime | None:
        return self.signed_events.get(email_key(email))

    def viewed_event_at(self, email: str) -> datetime | None:
        return self.viewed_events.get(email_key(email))


def _form_field_items(form_data: object) -> list[object]:
    if isinstance(form_data, list):
        return list(form_data)  # pyright: ignore[reportUnknownArgumentType]
    if isinstance(form_data, Mapping):
        fields = form_data.get("fields")  # pyright: ignore[reportUnknownMemberType]
        if isinstance(fields, list):
            return list(fields)  # pyright: ignore[reportUnknownArgumentType]
        log.debug("Unrecognized form data shape: %s", type(form_data).__name__)
    return []


def _event_items(events: object) -> list[object]:
    if isinstance(events, Mapping):
        items = events.get("events")  # pyright: ignore[reportUnknownMemberType]
        if isinstance(items, list):
            return list(items)  # pyright: ignore[reportUnknownArgumentType]
    return []


def _parse_all[T: ProviderModel](model: type[T], items: Iterable[object]) -> list[T]:
    parsed: list[T] = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError:
            log.debug("Skipping unparseable %s entry", model.__name__)
    return parsed


def collect_evidence(*, form_data: object = None, events: object = None) -> SignEvidence:
    """Index filled signature fields and sign/view events by recipient email.

    The earliest timestamp per email wins for both event kinds.
    """

    signature_fields = tuple(
        candidate
        for candidate in _parse_all(FormFieldPayload, _form_field_items(form_data))
        if candidate.is_filled_signature
    )

    signed: dict[str, datetime | None] = {}
    viewed: dict[str, datetime | None] = {}
    for event in _parse_all(EventPayload, _event_items(events)):
        if event.participant_email is None:
            continue
        event_type = event.type.upper()
        if any(part in event_type for part in SIGN_EVENT_MARKERS):
            target = signed
        elif event_type in VIEW_EVENT_TYPES:
            target = viewed
        else:
            continue
        key = email_key(event.participant_email)
        target[key] = _earliest(target.get(key), event.date)

    return SignEvidence(
        signature_fields=signature_fields,
        signed_events=signed,
        viewed_events=viewed,
    )


def _earliest(current: datetime | None, candidate: datetime | None) -> datetime | None:
    if current is None:
        return candidate
    if candidate is None:
        return current
    return min(as_utc(current), as_utc(candidate))
