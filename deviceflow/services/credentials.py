"""
Credential lifecycle: device flow completion, token refresh and logout.

``CredentialManager`` is the only component that writes the token store. Every
refresh runs inside one ``asyncio.Lock`` covering load, expiry check, provider
round trips and save, so concurrent callers share a single refresh.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from deviceflow.clients.provider_auth import AUTHORIZATION_PENDING, ProviderOAuthClient
from deviceflow.clients.token_store import TokenStore
from deviceflow.core.errors import (
    AuthError,
    DeviceFlowExpiredError,
    NotAuthenticatedError,
    ProviderError,
    TokenDecodeError,
    TokenStoreIOError,
)
from deviceflow.models.credentials import CredentialRecord
from deviceflow.schemas.auth import DeviceCodeInfo, TokenPair

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


class CredentialManager:
    """Hands out valid access tokens and drives the device authorization flow."""

    _REFRESH_WINDOW = timedelta(minutes=5)
    _MIN_POLL_INTERVAL = 5

    def __init__(
        self,
        store: TokenStore,
        oauth_client: ProviderOAuthClient,
        *,
        clock: Clock = time.time,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def start_device_flow(self) -> DeviceCodeInfo:
        """Request a device code; nothing is stored until the flow completes."""
        return await self._oauth.start_device_authorization()

    async def complete_device_flow(
        self, *, device_code: str, interval: int, expires_in: int
    ) -> CredentialRecord:
        """
        Poll until the user authorizes the device code or it expires.

        The deadline is fixed when the call starts. The lock is only taken for
        the final write, so a long wait never blocks token readers.
        """
        deadline = self._clock() + expires_in
        poll_interval = max(interval, self._MIN_POLL_INTERVAL)
        logger.info("Polling for device authorization every %ss", poll_interval)

        while True:
            await self._sleep(poll_interval)

            if self._clock() >= deadline:
                logger.warning("Device code expired")
                raise DeviceFlowExpiredError("Device code expired; please try again.")

            result = await self._oauth.poll_device_authorization(device_code)
            if result is AUTHORIZATION_PENDING:
                logger.debug("Authorization pending")
                continue

            logger.info("Device flow returned tokens, validating")
            record = await self._issue(result)
            async with self._lock:
                self._store.save(record)
            logger.info("Device flow complete: user=%s", record.username)
            return record

    async def get_valid_token(self, *, rejected_token: Optional[str] = None) -> CredentialRecord:
        """
        Return a record whose access token is not about to expire.

        Passing ``rejected_token`` forces a refresh when the stored access token
        is still the one a downstream API just rejected. If another caller has
        already replaced it, the fresher record is returned as is.
        """
        async with self._lock:
            record = self._store.load()
            if record is None:
                raise NotAuthenticatedError("Not authenticated.")

            window = int(self._REFRESH_WINDOW.total_seconds())
            forced = rejected_token is not None and rejected_token == record.access_token
            if not forced and not record.expires_within(window, now=self._clock()):
                return record

            # A failed refresh leaves the stored record in place.
            refreshed = await self._refresh(record)
            self._store.save(refreshed)
            return refreshed

    async def status(self) -> Optional[CredentialRecord]:
        """Return the current record, or None when no usable session exists."""
        try:
            return await self.get_valid_token()
        except AuthError as exc:
            logger.info("No stored session: %s", exc)
            return None

    async def logout(self) -> None:
        """Revoke the stored token when there is one, then clear the store."""
        async with self._lock:
            try:
                record = self._store.load()
            except (TokenDecodeError, TokenStoreIOError) as exc:
                logger.warning("Ignoring unreadable token file during logout: %s", exc)
                record = None

            if record is not None:
                try:
                    await self._oauth.revoke_token(record.access_token)
                except ProviderError as exc:
                    logger.warning("Token revocation failed, continuing logout: %s", exc)

            self._store.clear()
        logger.info("Logged out")

    async def _refresh(self, record: CredentialRecord) -> CredentialRecord:
        pair = await self._oauth.refresh_token(record.refresh_token)
        refreshed = await self._issue(pair)
        logger.info("Refresh success: user=%s", refreshed.username)
        return refreshed

    async def _issue(self, pair: TokenPair) -> CredentialRecord:
        issued_at = int(self._clock())
        username = await self._oauth.validate_token(pair.access_token)
        return CredentialRecord.issue(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            expires_in=pair.expires_in,
            username=username,
            issued_at=issued_at,
        )


__all__ = ["CredentialManager"]
