"""
OAuth device authorization client.

These helpers wrap the provider's device, token, validate and revoke endpoints.
Each call is a single round trip; retry policy belongs to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Union

import httpx

from deviceflow.core.config import ProviderSettings
from deviceflow.core.errors import ProviderError, ProviderResponseError
from deviceflow.schemas.auth import DeviceCodeInfo, TokenPair

logger = logging.getLogger(__name__)

DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"


class _AuthorizationPending:
    """Sentinel returned while the user has not yet approved the device code."""

    def __repr__(self) -> str:
        return "AUTHORIZATION_PENDING"


AUTHORIZATION_PENDING = _AuthorizationPending()

PollResult = Union[TokenPair, _AuthorizationPending]


class ProviderOAuthClient:
    """Start device flows, exchange device codes and manage token pairs."""

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds, transport=self._transport
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Request to {url} failed: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ProviderResponseError(
                f"Provider returned a non-JSON body: {response.text[:200]}"
            ) from exc
        if not isinstance(payload, dict):
            raise ProviderResponseError("Provider returned an unexpected JSON payload.")
        return payload

    @classmethod
    def _token_pair(cls, response: httpx.Response) -> TokenPair:
        payload = cls._json(response)
        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        expires_in = payload.get("expires_in")
        if not access_token or not refresh_token or expires_in is None:
            raise ProviderResponseError("Incomplete token payload returned from provider.")
        try:
            return TokenPair(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_in=int(expires_in),
            )
        except (TypeError, ValueError) as exc:
            raise ProviderResponseError("Malformed token payload returned from provider.") from exc

    async def start_device_authorization(self) -> DeviceCodeInfo:
        """Request a device code and the user-facing verification details."""
        logger.info("Requesting device code")
        response = await self._send(
            "POST",
            self._settings.device_url,
            data={"client_id": self._settings.client_id, "scopes": self._settings.scopes},
        )
        if not response.is_success:
            logger.warning("Device code request failed: %s", response.text)
            raise ProviderError(
                f"Device code request failed: {response.text}",
                status_code=response.status_code,
            )

        payload = self._json(response)
        try:
            info = DeviceCodeInfo(
                device_code=payload["device_code"],
                user_code=payload["user_code"],
                verification_uri=payload["verification_uri"],
                expires_in=int(payload["expires_in"]),
                interval=int(payload["interval"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderResponseError(
                "Incomplete device code payload returned from provider."
            ) from exc

        logger.info(
            "Device code ready: user_code=%s uri=%s", info.user_code, info.verification_uri
        )
        return info

    async def poll_device_authorization(self, device_code: str) -> PollResult:
        """
        Make one attempt to exchange a device code for tokens.

        Returns ``AUTHORIZATION_PENDING`` while the user has not approved the
        request yet; every other provider error raises ``ProviderError``.
        """
        response = await self._send(
            "POST",
            self._settings.token_url,
            data={
                "client_id": self._settings.client_id,
                "scopes": self._settings.scopes,
                "device_code": device_code,
                "grant_type": DEVICE_CODE_GRANT,
            },
        )
        if response.is_success:
            return self._token_pair(response)

        body = response.text
        try:
            error_payload = json.loads(body)
        except json.JSONDecodeError:
            error_payload = None

        message = None
        if isinstance(error_payload, dict):
            message = error_payload.get("message") or error_payload.get("error")
        if not message:
            logger.warning("Device poll unexpected response: %s", body)
            raise ProviderError(
                f"Device auth failed: {body}", status_code=response.status_code
            )
        if message == "authorization_pending":
            return AUTHORIZATION_PENDING

        logger.warning("Device poll error: %s", message)
        raise ProviderError(
            f"Device auth failed: {message}", status_code=response.status_code
        )

    async def refresh_token(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new access/refresh pair."""
        logger.info("Refreshing tokens")
        response = await self._send(
            "POST",
            self._settings.token_url,
            data={
                "client_id": self._settings.client_id,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if not response.is_success:
            logger.warning("Refresh failed: %s", response.text)
            raise ProviderError(
                f"Token refresh failed: {response.text}",
                status_code=response.status_code,
            )
        return self._token_pair(response)

    async def validate_token(self, access_token: str) -> str:
        """Return the login bound to an access token."""
        response = await self._send(
            "GET",
            self._settings.validate_url,
            headers={"Authorization": f"OAuth {access_token}"},
        )
        if not response.is_success:
            raise ProviderError("Token validation failed", status_code=response.status_code)

        login = self._json(response).get("login")
        if not login:
            raise ProviderResponseError("Validation payload did not include a login.")
        return str(login)

    async def revoke_token(self, access_token: str) -> None:
        """Ask the provider to revoke an access token."""
        response = await self._send(
            "POST",
            self._settings.revoke_url,
            data={"client_id": self._settings.client_id, "token": access_token},
        )
        if not response.is_success:
            raise ProviderError(
                f"Token revocation failed: {response.text}",
                status_code=response.status_code,
            )


__all__ = [
    "AUTHORIZATION_PENDING",
    "DEVICE_CODE_GRANT",
    "PollResult",
    "ProviderOAuthClient",
]
