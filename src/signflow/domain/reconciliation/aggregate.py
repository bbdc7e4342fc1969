"""Derive the document lifecycle status from recipient states."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from signflow.domain.model import DocumentStatus, RecipientState, SigningFlow

from .normalize import fold_token

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .ordering import SigningParticipant

_AGREEMENT_CANCELLED: Final = frozenset({"cancelled", "canceled", "recalled"})
_AGREEMENT_EXPIRED: Final = frozenset({"expired"})


def aggregate_status(
    recipients: Sequence[SigningParticipant],
    *,
    flow: SigningFlow,
    transmitted: bool,
    agreement_status: str | None = None,
) -> DocumentStatus:
    """Return the document status implied by ``recipients``.

    Provider-reported cancellation or expiry of the whole agreement takes
    precedence over anything the recipients say.
    """

    agreement_token = fold_token(agreement_status)
    if agreement_token in _AGREEMENT_CANCELLED:
        return DocumentStatus.CANCELLED
    if agreement_token in _AGREEMENT_EXPIRED:
        return DocumentStatus.EXPIRED

    states = [recipient.state for recipient in recipients]
    if RecipientState.DECLINED in states:
        return DocumentStatus.CANCELLED

    if RecipientState.EXPIRED in states:
        # In a sequential flow nobody downstream of an expired signer can act.
        if flow is SigningFlow.SEQUENTIAL or not any(state.is_actionable for state in states):
            return DocumentStatus.EXPIRED

    signed = sum(1 for state in states if state is RecipientState.SIGNED)
    if states and signed == len(states):
        return DocumentStatus.COMPLETED
    if signed:
        return DocumentStatus.PARTIALLY_SIGNED
    if transmitted:
        return DocumentStatus.SENT_FOR_SIGNATURE
    return DocumentStatus.READY_FOR_SIGNATURE
