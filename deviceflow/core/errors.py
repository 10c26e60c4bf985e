"""
Exception hierarchy shared by the token store, provider client and credential
manager.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every credential lifecycle failure."""


class TokenStoreIOError(AuthError):
    """Raised when the token file cannot be read or written."""


class TokenDecodeError(AuthError):
    """Raised when the persisted credential record is corrupt."""


class ProviderResponseError(AuthError):
    """Raised when the provider returns a success status with a malformed body."""


class NotAuthenticatedError(AuthError):
    """Raised when no credential record is stored."""


class ProviderError(AuthError):
    """Raised when the provider rejects a request or cannot be reached."""

    def __init__(self, reason: str, *, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class DeviceFlowExpiredError(AuthError):
    """Raised when the device code expires before the user authorizes it."""


class ApiPathError(AuthError):
    """Raised when an API path is malformed or points outside the configured API host."""


__all__ = [
    "ApiPathError",
    "AuthError",
    "DeviceFlowExpiredError",
    "NotAuthenticatedError",
    "ProviderError",
    "ProviderResponseError",
    "TokenDecodeError",
    "TokenStoreIOError",
]
