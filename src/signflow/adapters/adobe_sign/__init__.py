"""Adobe Sign adapter: agreement status snapshots and reminder delivery."""

from __future__ import annotations

from .client import (
    AdobeSignStatusSource,
    agreement_path,
    raise_for_provider_status,
    request_headers,
    request_json,
)
from .reminders import AdobeSignReminderDispatcher
from .schema import ErrorResponse, ReminderCreationResult, ReminderRequest

__all__ = [
    "AdobeSignReminderDispatcher",
    "AdobeSignStatusSource",
    "ErrorResponse",
    "ReminderCreationResult",
    "ReminderRequest",
    "agreement_path",
    "raise_for_provider_status",
    "request_headers",
    "request_json",
]
