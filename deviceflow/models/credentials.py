"""
Domain model for the persisted credential record.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, Field


class CredentialRecord(BaseModel):
    """Represents the single token record kept in the token file."""

    access_token: str = Field(..., description="Bearer token used in API authorization headers.")
    refresh_token: str = Field(..., description="Token exchanged for a new access token.")
    expires_at: int = Field(..., description="Unix timestamp (seconds) when the access token expires.")
    username: str = Field(..., description="Login resolved by validating the access token.")

    @classmethod
    def issue(
        cls,
        *,
        access_token: str,
        refresh_token: str,
        expires_in: int,
        username: str,
        issued_at: int,
    ) -> "CredentialRecord":
        """Build a record whose expiry is derived from the issuance time."""
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=issued_at + int(expires_in),
            username=username,
        )

    def expires_within(self, seconds: int, *, now: float | None = None) -> bool:
        """Return True when the access token expires within ``seconds``."""
        current = time.time() if now is None else now
        return current >= self.expires_at - seconds


__all__ = ["CredentialRecord"]
