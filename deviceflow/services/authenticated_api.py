"""Authenticated GET requests against the provider API on behalf of the user."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Optional

import httpx

from deviceflow.core.config import ProviderSettings
from deviceflow.core.errors import ApiPathError, ProviderError
from deviceflow.services.credentials import CredentialManager

logger = logging.getLogger(__name__)


class AuthenticatedApiClient:
    """Attach the current bearer token and retry once after a forced refresh on 401."""

    def __init__(
        self,
        manager: CredentialManager,
        settings: ProviderSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._manager = manager
        self._settings = settings
        self._transport = transport

    def _url(self, path: str) -> str:
        base = httpx.URL(self._settings.api_base_url)
        try:
            target = httpx.URL(path)
        except httpx.InvalidURL as exc:
            raise ApiPathError(f"Invalid API path {path!r}: {exc}") from exc
        if not (target.scheme or target.host):
            return f"{self._settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"
        if (target.scheme, target.host, target.port) != (base.scheme, base.host, base.port):
            logger.warning("Refusing to send credentials to %s", target.host or path)
            raise ApiPathError(
                f"Absolute URLs must point at {base.scheme}://{base.host}, got {path!r}."
            )
        return path

    async def _get(self, client: httpx.AsyncClient, url: str, token: str, **kwargs: Any) -> httpx.Response:
        headers = {
            "Client-Id": self._settings.client_id,
            "Authorization": f"Bearer {token}",
        }
        try:
            return await client.get(url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Request to {url} failed: {exc}") from exc

    async def get(self, path: str, **kwargs: Any) -> str:
        """GET ``path`` and return the raw response body."""
        url = self._url(path)
        async with httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds, transport=self._transport
        ) as client:
            record = await self._manager.get_valid_token()
            response = await self._get(client, url, record.access_token, **kwargs)

            if response.status_code == HTTPStatus.UNAUTHORIZED:
                logger.info("API rejected token, refreshing and retrying once")
                record = await self._manager.get_valid_token(rejected_token=record.access_token)
                response = await self._get(client, url, record.access_token, **kwargs)

        if not response.is_success:
            raise ProviderError(
                f"API GET failed: {response.text}", status_code=response.status_code
            )
        return response.text


__all__ = ["AuthenticatedApiClient"]
