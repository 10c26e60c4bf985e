"""Service layer exports."""

from .authenticated_api import AuthenticatedApiClient
from .commands import AuthCommandError, AuthCommands
from .credentials import CredentialManager

__all__ = [
    "AuthCommandError",
    "AuthCommands",
    "AuthenticatedApiClient",
    "CredentialManager",
]
