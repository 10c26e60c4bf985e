"""Schemas exchanged by the device flow commands."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class DeviceCodeInfo(BaseModel):
    """Device authorization returned by the provider when a flow starts."""

    device_code: str = Field(..., description="Opaque code the caller hands back when polling.")
    user_code: str = Field(..., description="Short code the user types on the verification page.")
    verification_uri: str = Field(..., description="Page where the user approves the request.")
    expires_in: int = Field(..., description="Seconds until the device code expires.")
    interval: int = Field(..., description="Minimum seconds between poll attempts.")


class TokenPair(BaseModel):
    """Access/refresh pair returned by the token endpoint."""

    access_token: str
    refresh_token: str
    expires_in: int


class DevicePollRequest(BaseModel):
    """Payload sent by the host to wait for a started device flow."""

    device_code: str
    interval: int = Field(5, ge=0)
    expires_in: int = Field(..., ge=0)


class AuthStatusResponse(BaseModel):
    """Whether a usable session exists, and for whom."""

    authenticated: bool
    username: Optional[str] = None


class SubsystemTokenResponse(BaseModel):
    """Bearer credential handed to a dependent subsystem such as a chat client."""

    token: str
    username: str


__all__ = [
    "AuthStatusResponse",
    "DeviceCodeInfo",
    "DevicePollRequest",
    "SubsystemTokenResponse",
    "TokenPair",
]
