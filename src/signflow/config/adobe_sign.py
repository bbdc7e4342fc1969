"""Adobe Sign configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import env_float, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

ADOBE_SIGN_BASE_URL = "https://api.na1.adobesign.com/"
ADOBE_SIGN_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class AdobeSignConfig:
    """Holds Adobe Sign API configuration values."""

    access_token: str
    api_user_email: str | None
    resilience: ResilienceConfig

    @property
    def base_url(self) -> str | None:
        return self.resilience.base_url


def _normalise_base_url(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"


def get_adobe_sign_config(*, resilience: ResilienceConfig | None = None) -> AdobeSignConfig:
    values = require_env_vars(("ADOBE_SIGN_ACCESS_TOKEN",))
    base_url = os.getenv("ADOBE_SIGN_BASE_URL") or ADOBE_SIGN_BASE_URL
    api_user_email = (os.getenv("ADOBE_API_USER_EMAIL") or "").strip() or None
    return AdobeSignConfig(
        access_token=values["ADOBE_SIGN_ACCESS_TOKEN"],
        api_user_email=api_user_email,
        resilience=resilience
        or ResilienceConfig(
            name="adobe_sign",
            base_url=_normalise_base_url(base_url.strip()),
            timeout_seconds=env_float(
                "SIGNFLOW_PROVIDER_TIMEOUT_SECONDS",
                default=ADOBE_SIGN_TIMEOUT_SECONDS,
                minimum=0.1,
            ),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
    )
