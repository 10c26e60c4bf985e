"""Expose constructed client wrappers."""

from .provider_auth import AUTHORIZATION_PENDING, ProviderOAuthClient
from .token_cipher import TokenCipherService
from .token_store import TokenStore

__all__ = [
    "AUTHORIZATION_PENDING",
    "ProviderOAuthClient",
    "TokenCipherService",
    "TokenStore",
]
