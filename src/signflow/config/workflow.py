"""Reconciliation and reminder tuning."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import env_float, env_int

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_COOLDOWN_MINUTES = 60


@dataclass(frozen=True, slots=True)
class WorkflowConfig:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    reminder_cooldown: timedelta = timedelta(minutes=DEFAULT_COOLDOWN_MINUTES)


def get_workflow_config() -> WorkflowConfig:
    return WorkflowConfig(
        max_attempts=env_int(
            "SIGNFLOW_PROVIDER_MAX_ATTEMPTS", default=DEFAULT_MAX_ATTEMPTS, minimum=1
        ),
        backoff_seconds=env_float(
            "SIGNFLOW_PROVIDER_BACKOFF_SECONDS", default=DEFAULT_BACKOFF_SECONDS
        ),
        timeout_seconds=env_float(
            "SIGNFLOW_PROVIDER_TIMEOUT_SECONDS", default=DEFAULT_TIMEOUT_SECONDS, minimum=0.1
        ),
        reminder_cooldown=timedelta(
            minutes=env_int(
                "SIGNFLOW_REMINDER_COOLDOWN_MINUTES", default=DEFAULT_COOLDOWN_MINUTES
            )
        ),
    )
