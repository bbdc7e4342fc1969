"""Signature workflow reconciliation core.

Flow of one reconciliation pass:
1) locate the participant list in the provider payload (locator chain)
2) collect corroborating evidence (form fields, sign events)
3) normalize each participant's status into a canonical recipient state
4) merge with the local state under the monotonic-progress rule
5) classify the signing order and aggregate the document status
6) apply the resulting plan and commit once
"""

from __future__ import annotations

from .aggregate import aggregate_status
from .apply import apply_plan, mark_expired
from .engine import ReconciliationEngine, reconcile_document
from .evidence import SignEvidence, collect_evidence
from .locate import (
    DEFAULT_LOCATORS,
    Locator,
    ParticipantEntry,
    locate_participants,
    locate_signing_urls,
)
from .merge import is_allowed_transition, merge_state
from .normalize import StatusSignals, fold_token, normalize_status
from .ordering import SigningOrder, SigningParticipant, classify, derive_flow, stages
from .plan import ReconciledDocument, ReconciliationPlan, RecipientUpdate, StateTransition

__all__ = [
    "DEFAULT_LOCATORS",
    "Locator",
    "ParticipantEntry",
    "ReconciledDocument",
    "ReconciliationEngine",
    "ReconciliationPlan",
    "RecipientUpdate",
    "SignEvidence",
    "SigningOrder",
    "SigningParticipant",
    "StateTransition",
    "StatusSignals",
    "aggregate_status",
    "apply_plan",
    "classify",
    "collect_evidence",
    "derive_flow",
    "fold_token",
    "is_allowed_transition",
    "locate_participants",
    "locate_signing_urls",
    "mark_expired",
    "merge_state",
    "normalize_status",
    "reconcile_document",
    "stages",
]
