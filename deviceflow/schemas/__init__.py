"""Public schema exports."""

from .auth import (
    AuthStatusResponse,
    DeviceCodeInfo,
    DevicePollRequest,
    SubsystemTokenResponse,
    TokenPair,
)

__all__ = [
    "AuthStatusResponse",
    "DeviceCodeInfo",
    "DevicePollRequest",
    "SubsystemTokenResponse",
    "TokenPair",
]
