"""Map raw provider status tokens to canonical recipient states.

Providers report recipient progress through several overlapping fields (the
member status, the status of the participant set the member belongs to, the
agreement status) plus indirect evidence such as a filled signature field or a
sign event in the audit log. This module folds those signals into exactly one
``RecipientState``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Final

from signflow.domain.model import RecipientState

log = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s\-]+")

DECLINED_TOKENS: Final = frozenset({"declined", "rejected", "cancelled", "canceled"})
EXPIRED_TOKENS: Final = frozenset({"expired", "recalled"})
SIGNED_TOKENS: Final = frozenset(
    {"signed", "completed", "approved", "accepted", "form_filled", "acknowledged", "delivered"}
)
OPEN_TOKENS: Final = frozenset({"active", "open", "in_process"})
ACTIONABLE_TOKENS: Final = frozenset(
    {
        "waiting_for_my_signature",
        "waiting_for_my_approval",
        "waiting_for_my_acceptance",
        "waiting_for_my_acknowledgement",
        "waiting_for_my_form_filling",
        "waiting_for_my_delegation",
        "waiting_for_my_verification",
        "waiting_for_my_review",
        "out_for_signature",
        "out_for_approval",
        "out_for_acceptance",
        "out_for_form_filling",
        "out_for_delivery",
        "action_requested",
        "sent",
        "delegated",
        "waiting_for_verification",
        "waiting_for_faxing",
        "waiting_for_counter_signature",
        "waiting_for_signature",
        "active",
        "open",
        "in_process",
    }
)
VIEWED_TOKENS: Final = frozenset({"viewed", "document_viewed", "email_viewed"})
WAITING_TOKENS: Final = frozenset(
    {
        "not_yet_visible",
        "waiting_for_others",
        "waiting_for_authoring",
        "waiting_for_my_prerequisites",
        "waiting_for_prerequisite",
        "waiting_for_prerequisites",
    }
)
DRAFT_TOKENS: Final = frozenset({"created", "draft", "authoring", "delegation_pending"})

_SET_WAITING_FOR_OTHERS: Final = "waiting_for_others"
_AGREEMENT_DONE_TOKENS: Final = frozenset({"signed", "completed"})


@dataclass(slots=True, frozen=True, kw_only=True)
class StatusSignals:
    """Contextual signals that accompany a recipient's raw status token."""

    participant_set_status: str | None = None
    agreement_status: str | None = None
    has_form_field_signature: bool = False
    has_sign_event: bool = False

    @property
    def has_evidence(self) -> bool:
        return self.has_form_field_signature or self.has_sign_event


def fold_token(raw: str | None) -> str:
    """Lower-case a provider token and fold spaces/hyphens to underscores."""
    if raw is None:
        return ""
    return _SEPARATORS.sub("_", raw.strip()).lower()


def _is_waiting_for_me(token: str) -> bool:
    return token.startswith("waiting_for_my_") and token not in WAITING_TOKENS


def normalize_status(
    raw_status: str | None, signals: StatusSignals | None = None
) -> RecipientState:
    """Return the canonical state for ``raw_status`` given ``signals``.

    Rules are evaluated in precedence order; the first match wins.
    """

    signals = signals or StatusSignals()
    token = fold_token(raw_status)
    set_token = fold_token(signals.participant_set_status)

    if signals.has_evidence:
        return RecipientState.SIGNED

    if token in DECLINED_TOKENS:
        return RecipientState.DECLINED
    if token in EXPIRED_TOKENS:
        return RecipientState.EXPIRED
    if token in SIGNED_TOKENS:
        return RecipientState.SIGNED

    # An open member inside a set that is already waiting on others has acted.
    if token in OPEN_TOKENS and set_token == _SET_WAITING_FOR_OTHERS:
        return RecipientState.SIGNED

    if token in ACTIONABLE_TOKENS or _is_waiting_for_me(token):
        return RecipientState.SENT
    if token in VIEWED_TOKENS:
        return RecipientState.VIEWED
    if token in WAITING_TOKENS:
        return RecipientState.WAITING
    if token in DRAFT_TOKENS:
        return RecipientState.PENDING

    if fold_token(signals.agreement_status) in _AGREEMENT_DONE_TOKENS:
        return RecipientState.SIGNED

    log.warning(
        "Unknown recipient status %r (set status %r); treating as %s",
        raw_status,
        signals.participant_set_status,
        RecipientState.SENT,
    )
    return RecipientState.SENT
