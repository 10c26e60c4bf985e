"""Command adapters exposed to the host application."""

from __future__ import annotations

import logging

from deviceflow.core.errors import (
    ApiPathError,
    AuthError,
    DeviceFlowExpiredError,
    NotAuthenticatedError,
    ProviderError,
    ProviderResponseError,
)
from deviceflow.schemas.auth import AuthStatusResponse, DeviceCodeInfo, SubsystemTokenResponse
from deviceflow.services.credentials import CredentialManager

logger = logging.getLogger(__name__)


class AuthCommandError(Exception):
    """User-facing failure raised by a command."""

    NOT_AUTHENTICATED = "not_authenticated"
    FLOW_EXPIRED = "flow_expired"
    PROVIDER = "provider"
    STORAGE = "storage"
    INVALID_REQUEST = "invalid_request"

    def __init__(self, message: str, *, kind: str) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind

    @classmethod
    def from_auth_error(cls, exc: AuthError) -> "AuthCommandError":
        if isinstance(exc, NotAuthenticatedError):
            return cls("Not authenticated. Log in to continue.", kind=cls.NOT_AUTHENTICATED)
        if isinstance(exc, DeviceFlowExpiredError):
            return cls("Device code expired. Please try again.", kind=cls.FLOW_EXPIRED)
        if isinstance(exc, ApiPathError):
            return cls(str(exc), kind=cls.INVALID_REQUEST)
        if isinstance(exc, (ProviderError, ProviderResponseError)):
            return cls(str(exc), kind=cls.PROVIDER)
        return cls(f"Credential storage error: {exc}", kind=cls.STORAGE)


class AuthCommands:
    """Begin/poll device flows, report status, log out and hand out tokens."""

    def __init__(self, manager: CredentialManager) -> None:
        self._manager = manager

    async def begin_device_flow(self) -> DeviceCodeInfo:
        try:
            return await self._manager.start_device_flow()
        except AuthError as exc:
            raise AuthCommandError.from_auth_error(exc) from exc

    async def poll_device_flow(
        self, *, device_code: str, interval: int, expires_in: int
    ) -> AuthStatusResponse:
        """Block until the started flow resolves."""
        try:
            record = await self._manager.complete_device_flow(
                device_code=device_code, interval=interval, expires_in=expires_in
            )
        except AuthError as exc:
            raise AuthCommandError.from_auth_error(exc) from exc
        return AuthStatusResponse(authenticated=True, username=record.username)

    async def check_status(self) -> AuthStatusResponse:
        """Report whether a usable session exists; never raises auth errors."""
        logger.info("Checking stored session")
        record = await self._manager.status()
        if record is None:
            return AuthStatusResponse(authenticated=False, username=None)
        logger.info("Stored session valid: user=%s", record.username)
        return AuthStatusResponse(authenticated=True, username=record.username)

    async def logout(self) -> None:
        try:
            await self._manager.logout()
        except AuthError as exc:
            raise AuthCommandError.from_auth_error(exc) from exc

    async def fetch_subsystem_token(self) -> SubsystemTokenResponse:
        """Return a bearer token for a dependent client such as chat."""
        try:
            record = await self._manager.get_valid_token()
        except AuthError as exc:
            raise AuthCommandError.from_auth_error(exc) from exc
        return SubsystemTokenResponse(token=record.access_token, username=record.username)


__all__ = ["AuthCommandError", "AuthCommands"]
