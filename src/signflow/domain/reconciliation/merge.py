"""Monotonic-progress merge of recipient states."""

from __future__ import annotations

from typing import Final

from signflow.domain.model import RecipientState

_PROGRESS_RANK: Final = {
    RecipientState.PENDING: 0,
    RecipientState.SENT: 1,
    RecipientState.VIEWED: 2,
}


def is_allowed_transition(current: RecipientState, candidate: RecipientState) -> bool:
    """Whether ``current`` may be replaced by ``candidate``.

    Terminal states are final. ``WAITING`` reflects turn eligibility rather
    than progress, so it may be entered or left at any time.
    """

    if current is candidate:
        return True
    if current.is_terminal:
        return False
    if candidate.is_terminal:
        return True
    if RecipientState.WAITING in (current, candidate):
        return True
    return _PROGRESS_RANK[candidate] >= _PROGRESS_RANK[current]


def merge_state(current: RecipientState, candidate: RecipientState) -> RecipientState:
    return candidate if is_allowed_transition(current, candidate) else current
