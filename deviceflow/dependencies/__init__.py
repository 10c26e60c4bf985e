"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    AuthContext,
    build_auth_context,
    get_api_client,
    get_auth_commands,
    get_auth_context,
)

__all__ = [
    "AuthContext",
    "build_auth_context",
    "get_api_client",
    "get_auth_commands",
    "get_auth_context",
]
