"""Locator chain for participant lists in provider agreement payloads.

The provider has shipped the participant list under several different keys
over time and across endpoints. Each locator below understands exactly one
shape; the chain tries them in priority order and keeps the first non-empty
result. A payload that is present but does not validate for a shape is
reported as ``MalformedProviderShape`` and the chain moves on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Final

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from signflow.domain.errors import MalformedProviderShape
from signflow.domain.model import email_key

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)

COMPLETED_DATE_ALIASES: Final = ("completedDate", "signedDate", "dateCompleted", "dateSigned")
ACCESSED_DATE_ALIASES: Final = (
    "accessDate",
    "lastViewedDate",
    "viewDate",
    "lastAccessDate",
    "dateViewed",
    "dateAccessed",
)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ProviderModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MemberPayload(ProviderModel):
    email: str | None = None
    name: str | None = None
    status: str | None = None
    order: int | None = None
    participant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("participantId", "id")
    )
    completed_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices(*COMPLETED_DATE_ALIASES)
    )
    accessed_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices(*ACCESSED_DATE_ALIASES)
    )

    _blank_fields = field_validator(
        "email", "name", "status", "completed_at", "accessed_at", mode="before"
    )(_blank_to_none)


class ParticipantSetPayload(ProviderModel):
    members: list[MemberPayload] = Field(
        default_factory=list[MemberPayload], validation_alias=AliasChoices("memberInfos", "members")
    )
    status: str | None = None
    order: int | None = None
    participant_set_id: str | None = Field(
        default=None, validation_alias=AliasChoices("id", "participantSetId")
    )

    _blank_status = field_validator("status", mode="before")(_blank_to_none)


_SET_LIST: Final = TypeAdapter(list[ParticipantSetPayload])
_MEMBER_LIST: Final = TypeAdapter(list[MemberPayload])
_SINGLE_SET: Final = TypeAdapter(ParticipantSetPayload)


@dataclass(slots=True, frozen=True, kw_only=True)
class ParticipantEntry:
    """One provider participant, flattened out of whatever shape carried it."""

    email: str
    status: str | None
    participant_set_status: str | None = None
    order: int = 1
    name: str | None = None
    participant_id: str | None = None
    completed_at: datetime | None = None
    accessed_at: datetime | None = None


type Payload = Mapping[str, Any]
type Locator = Callable[[Payload], tuple[ParticipantEntry, ...] | None]


def _dig(payload: Payload, *path: str) -> object | None:
    current: object = payload
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)  # pyright: ignore[reportUnknownMemberType]
    return current


def _validate[T](adapter: TypeAdapter[T], raw: object, shape: str) -> T:
    try:
        return adapter.validate_python(raw)
    except ValidationError as exc:
        raise MalformedProviderShape(f"{shape}: {exc.error_count()} validation error(s)") from exc


def _entries_from_sets(sets: Sequence[ParticipantSetPayload]) -> tuple[ParticipantEntry, ...]:
    entries: list[ParticipantEntry] = []
    for index, participant_set in enumerate(sets, start=1):
        set_order = participant_set.order if participant_set.order is not None else index
        for member in participant_set.members:
            if member.email is None:
                continue
            entries.append(
                ParticipantEntry(
                    email=member.email,
                    status=member.status or participant_set.status,
                    participant_set_status=participant_set.status,
                    order=set_order,
                    name=member.name,
                    participant_id=member.participant_id,
                    completed_at=member.completed_at,
                    accessed_at=member.accessed_at,
                )
            )
    return tuple(entries)


def _entries_from_members(members: Sequence[MemberPayload]) -> tuple[ParticipantEntry, ...]:
    return tuple(
        ParticipantEntry(
            email=member.email,
            status=member.status,
            order=member.order if member.order is not None else index,
            name=member.name,
            participant_id=member.participant_id,
            completed_at=member.completed_at,
            accessed_at=member.accessed_at,
        )
        for index, member in enumerate(members, start=1)
        if member.email is not None
    )


def _set_list_locator(*path: str) -> Locator:
    shape = ".".join(path)

    def locate(payload: Payload) -> tuple[ParticipantEntry, ...] | None:
        raw = _dig(payload, *path)
        if not isinstance(raw, list):
            return None
        return _entries_from_sets(_validate(_SET_LIST, raw, shape))

    locate.__name__ = f"locate_{shape.replace('.', '_')}"
    return locate


def _member_list_locator(*path: str) -> Locator:
    shape = ".".join(path)

    def locate(payload: Payload) -> tuple[ParticipantEntry, ...] | None:
        raw = _dig(payload, *path)
        if not isinstance(raw, list):
            return None
        return _entries_from_members(_validate(_MEMBER_LIST, raw, shape))

    locate.__name__ = f"locate_{shape.replace('.', '_')}"
    return locate


def locate_single_participant_set(payload: Payload) -> tuple[ParticipantEntry, ...] | None:
    raw = payload.get("participantSet")
    if not isinstance(raw, Mapping):
        return None
    participant_set = _validate(_SINGLE_SET, raw, "participantSet")
    return _entries_from_sets([participant_set])


DEFAULT_LOCATORS: Final[tuple[Locator, ...]] = (
    _set_list_locator("participantSets"),
    _set_list_locator("participantSetsInfo"),
    _set_list_locator("participants", "participantSets"),
    _member_list_locator("participants"),
    locate_single_participant_set,
    _member_list_locator("participants", "members"),
)


def locate_participants(
    payload: Payload | None,
    locators: Sequence[Locator] = DEFAULT_LOCATORS,
) -> tuple[ParticipantEntry, ...]:
    """Return participants from the first locator that yields a non-empty list."""

    if not payload:
        return ()
    for locator in locators:
        try:
            entries = locator(payload)
        except MalformedProviderShape as exc:
            log.warning("Skipping malformed participant shape (%s): %s", locator.__name__, exc)
            continue
        if entries:
            log.debug("Participants located via %s (%d entries)", locator.__name__, len(entries))
            return entries
    log.warning("No participant list found in agreement payload")
    return ()


class SigningUrlPayload(ProviderModel):
    email: str | None = None
    esign_url: str | None = Field(default=None, alias="esignUrl")


class SigningUrlSetPayload(ProviderModel):
    signing_urls: list[SigningUrlPayload] = Field(
        default_factory=list[SigningUrlPayload], alias="signingUrls"
    )


class SigningUrlsResponse(ProviderModel):
    signing_url_set_infos: list[SigningUrlSetPayload] = Field(
        default_factory=list[SigningUrlSetPayload], alias="signingUrlSetInfos"
    )


def locate_signing_urls(payload: Payload | None) -> dict[str, str]:
    """Map lower-cased recipient email to the recipient's signing URL."""

    if not payload:
        return {}
    try:
        response = SigningUrlsResponse.model_validate(payload)
    except ValidationError:
        log.warning("Ignoring malformed signing URL listing")
        return {}
    urls: dict[str, str] = {}
    for url_set in response.signing_url_set_infos:
        for entry in url_set.signing_urls:
            if entry.email and entry.esign_url:
                urls.setdefault(email_key(entry.email), entry.esign_url)
    return urls
