"""Signing-order analysis: who has to act next."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import groupby
from typing import TYPE_CHECKING, Protocol

from signflow.domain.model import RecipientState, SigningFlow

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)


class SigningParticipant(Protocol):
    """Anything that has a signing position and a canonical state."""

    @property
    def email(self) -> str: ...

    @property
    def order(self) -> int: ...

    @property
    def state(self) -> RecipientState: ...


@dataclass(slots=True, frozen=True)
class SigningOrder[T: SigningParticipant]:
    flow: SigningFlow
    current_signers: tuple[T, ...]


def derive_flow(recipients: Sequence[SigningParticipant]) -> SigningFlow:
    """Distinct order values mean one signer per stage; any tie means parallel."""
    orders = [recipient.order for recipient in recipients]
    if len(set(orders)) == len(orders):
        return SigningFlow.SEQUENTIAL
    return SigningFlow.PARALLEL


def stages[T: SigningParticipant](recipients: Sequence[T]) -> list[tuple[T, ...]]:
    """Group recipients by ``order``; insertion order is kept inside a stage."""
    ordered = sorted(recipients, key=lambda recipient: recipient.order)
    return [tuple(group) for _, group in groupby(ordered, key=lambda recipient: recipient.order)]


def classify[T: SigningParticipant](
    recipients: Sequence[T], *, flow: SigningFlow | None = None
) -> SigningOrder[T]:
    """Classify the workflow and compute the recipients expected to act now.

    An explicit ``flow`` wins over the one derived from order values. In a
    sequential flow, recipients sharing an order value form one stage that
    signs in parallel.
    """

    resolved_flow = flow or derive_flow(recipients)
    if resolved_flow is SigningFlow.PARALLEL:
        current = tuple(recipient for recipient in recipients if recipient.state.is_actionable)
        return SigningOrder(flow=resolved_flow, current_signers=current)

    for stage in stages(recipients):
        candidates = tuple(
            recipient
            for recipient in stage
            if not recipient.state.is_terminal and recipient.state is not RecipientState.WAITING
        )
        if candidates:
            return SigningOrder(flow=resolved_flow, current_signers=candidates)

    waiting = [recipient.email for recipient in recipients if not recipient.state.is_terminal]
    if waiting:
        log.warning(
            "Sequential flow has open recipients but all are waiting: %s", ", ".join(waiting)
        )
    return SigningOrder(flow=resolved_flow, current_signers=())
