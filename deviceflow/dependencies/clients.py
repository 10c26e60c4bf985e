"""
Construction of the shared credential service objects and the FastAPI
dependencies that hand them to routes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request

from deviceflow.clients import ProviderOAuthClient, TokenCipherService, TokenStore
from deviceflow.core.config import AppSettings
from deviceflow.services import AuthCommands, AuthenticatedApiClient, CredentialManager


@dataclass
class AuthContext:
    """Everything the credential commands need, owned by the application."""

    settings: AppSettings
    store: TokenStore
    oauth_client: ProviderOAuthClient
    manager: CredentialManager
    commands: AuthCommands
    api_client: AuthenticatedApiClient


def build_auth_context(
    settings: AppSettings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AuthContext:
    """Wire the token store, provider client and manager for one application."""
    secret = settings.security.token_encryption_secret
    cipher = TokenCipherService(secret=secret) if secret else None
    store = TokenStore(settings.storage.tokens_path, cipher=cipher)
    oauth_client = ProviderOAuthClient(settings.provider, transport=transport)
    manager = CredentialManager(store, oauth_client)
    return AuthContext(
        settings=settings,
        store=store,
        oauth_client=oauth_client,
        manager=manager,
        commands=AuthCommands(manager),
        api_client=AuthenticatedApiClient(manager, settings.provider, transport=transport),
    )


def get_auth_context(request: Request) -> AuthContext:
    """FastAPI dependency returning the context built at startup."""
    return request.app.state.auth


def get_auth_commands(request: Request) -> AuthCommands:
    return get_auth_context(request).commands


def get_api_client(request: Request) -> AuthenticatedApiClient:
    return get_auth_context(request).api_client


__all__ = [
    "AuthContext",
    "build_auth_context",
    "get_api_client",
    "get_auth_commands",
    "get_auth_context",
]
