"""Adobe Sign REST access shared by the status source and the reminder dispatcher."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from signflow.adapters.http_resilience import ResilientClient
from signflow.config.adobe_sign import get_adobe_sign_config
from signflow.domain.errors import AgreementNotFound, ProviderError, ProviderUnavailable
from signflow.domain.ports.provider import ProviderSnapshot, ProviderStatusSource

from .schema import ErrorResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from signflow.config.adobe_sign import AdobeSignConfig
    from signflow.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

AGREEMENTS_PATH: Final = "api/rest/v6/agreements"
NOT_FOUND_STATUSES: Final = frozenset({401, 403, 404})
PARTICIPANT_SET_KEYS: Final = ("participantSets", "participantSetsInfo", "participantSet")


def agreement_path(agreement_id: str, *parts: str) -> str:
    return "/".join((AGREEMENTS_PATH, quote(agreement_id, safe=""), *parts))


def request_headers(config: AdobeSignConfig) -> dict[str, str]:
    headers = {
        "Authorization": f"Bearer {config.access_token}",
        "Accept": "application/json",
    }
    if config.api_user_email:
        headers["x-api-user"] = f"email:{config.api_user_email}"
    return headers


def _error_details(response: httpx.Response) -> str:
    try:
        return ErrorResponse.model_validate(response.json()).describe()
    except (ValueError, ValidationError):
        return response.reason_phrase or "no error details"


def raise_for_provider_status(response: httpx.Response, *, agreement_id: str) -> None:
    """Translate HTTP failures into domain errors."""

    status = response.status_code
    if status < 400:  # noqa: PLR2004
        return
    details = _error_details(response)
    if status in NOT_FOUND_STATUSES:
        raise AgreementNotFound(
            f"Agreement {agreement_id} not accessible (HTTP {status}): {details}",
            status_code=status,
        )
    if status == 429 or status >= 500:  # noqa: PLR2004
        raise ProviderUnavailable(
            f"Adobe Sign unavailable for agreement {agreement_id} (HTTP {status}): {details}",
            status_code=status,
        )
    raise ProviderError(
        f"Adobe Sign rejected request for agreement {agreement_id} (HTTP {status}): {details}",
        status_code=status,
    )


async def request_json(
    client: ResilientClient,
    method: str,
    path: str,
    *,
    agreement_id: str,
    headers: Mapping[str, str],
    json: object = None,
) -> Any:
    """Send one request; return the decoded JSON body, or ``None`` when it is not JSON."""

    try:
        if json is None:
            response = await client.request(method, path, headers=dict(headers))
        else:
            response = await client.request(method, path, headers=dict(headers), json=json)
    except httpx.TimeoutException as exc:
        raise ProviderUnavailable(f"Timed out calling Adobe Sign ({path}): {exc}") from exc
    except httpx.TransportError as exc:
        raise ProviderUnavailable(f"Network error calling Adobe Sign ({path}): {exc}") from exc

    raise_for_provider_status(response, agreement_id=agreement_id)
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        log.warning("Non-JSON response from Adobe Sign for %s", path)
        return None


def _has_participant_sets(agreement: Mapping[str, Any]) -> bool:
    return any(agreement.get(key) for key in PARTICIPANT_SET_KEYS)


@dataclass(slots=True)
class AdobeSignStatusSource:
    """Fetch agreement, members, form data, events and signing URLs for one agreement.

    The whole fetch runs under one request-scoped timeout; on expiry in-flight
    requests are abandoned and ``ProviderUnavailable`` is raised.
    """

    config: AdobeSignConfig = field(default_factory=get_adobe_sign_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(default=ResilientClient)
    timeout_seconds: float | None = None

    def __call__(self, agreement_id: str) -> ProviderSnapshot:
        return asyncio.run(self._fetch_with_deadline(agreement_id))

    async def _fetch_with_deadline(self, agreement_id: str) -> ProviderSnapshot:
        timeout = self.timeout_seconds or self.config.resilience.timeout_seconds
        try:
            return await asyncio.wait_for(self._fetch(agreement_id), timeout)
        except TimeoutError as exc:
            raise ProviderUnavailable(
                f"Timed out after {timeout:g}s fetching agreement {agreement_id}"
            ) from exc

    async def _fetch(self, agreement_id: str) -> ProviderSnapshot:
        headers = request_headers(self.config)
        async with self.client_factory(self.config.resilience) as client:
            agreement = await request_json(
                client,
                "GET",
                agreement_path(agreement_id),
                agreement_id=agreement_id,
                headers=headers,
            )
            if not isinstance(agreement, dict):
                log.warning("Agreement %s payload is not an object; using {}", agreement_id)
                agreement = {}

            if not _has_participant_sets(agreement):
                members = await self._optional(client, agreement_id, "members", headers=headers)
                if members is not None:
                    agreement = {**agreement, "participants": members}

            form_data, events, signing_urls = await asyncio.gather(
                self._optional(client, agreement_id, "formData", headers=headers),
                self._optional(client, agreement_id, "events", headers=headers),
                self._optional(client, agreement_id, "signingUrls", headers=headers),
            )

        return ProviderSnapshot(
            agreement_id=agreement_id,
            agreement=agreement,
            form_data=form_data,
            events=events if isinstance(events, dict) else None,
            signing_urls=signing_urls if isinstance(signing_urls, dict) else None,
        )

    async def _optional(
        self,
        client: ResilientClient,
        agreement_id: str,
        resource: str,
        *,
        headers: Mapping[str, str],
    ) -> Any:
        try:
            return await request_json(
                client,
                "GET",
                agreement_path(agreement_id, resource),
                agreement_id=agreement_id,
                headers=headers,
            )
        except ProviderError as exc:
            log.info(
                "Optional Adobe Sign resource %s unavailable for %s: %s",
                resource,
                agreement_id,
                exc,
            )
            return None


if TYPE_CHECKING:
    _source_check: ProviderStatusSource = AdobeSignStatusSource()
