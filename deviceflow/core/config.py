"""
Application configuration models and helpers.

Centralizes settings management so the HTTP surface and the login CLI share a
consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SCOPES = (
    "chat:read",
    "chat:edit",
    "moderator:read:followers",
    "user:read:chat",
    "channel:read:subscriptions",
    "bits:read",
    "channel:manage:broadcast",
    "channel:read:redemptions",
)


def _default_data_dir() -> Path:
    return Path.home() / ".config" / "streamer"


class ProviderSettings(BaseSettings):
    """Endpoints and client registration for the OAuth provider."""

    model_config = SettingsConfigDict(env_prefix="PROVIDER_", env_file=".env", extra="ignore")

    client_id: str = Field("yu2txwsc619qgqaghrv1xzf66swhad")
    scopes: str = Field(
        " ".join(DEFAULT_SCOPES),
        description="Space separated scope list sent with device and poll requests.",
    )
    device_url: str = Field("https://id.twitch.tv/oauth2/device")
    token_url: str = Field("https://id.twitch.tv/oauth2/token")
    validate_url: str = Field("https://id.twitch.tv/oauth2/validate")
    revoke_url: str = Field("https://id.twitch.tv/oauth2/revoke")
    api_base_url: str = Field(
        "https://api.twitch.tv/helix",
        description="Base URL for authenticated API calls made on behalf of the user.",
    )
    http_timeout_seconds: float = Field(10.0)

    @field_validator("scopes", mode="before")
    @classmethod
    def _join_scopes(cls, value: str | tuple[str, ...] | list[str]) -> str:
        """Support providing scopes as a list or a comma-separated string."""
        if isinstance(value, (list, tuple)):
            items = value
        else:
            items = value.replace(",", " ").split()
        return " ".join(scope.strip() for scope in items if scope.strip())


class StorageSettings(BaseSettings):
    """Where the credential record lives on disk."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", env_file=".env", extra="ignore")

    data_dir: Path = Field(default_factory=_default_data_dir)
    tokens_filename: str = Field("tokens.json")

    @property
    def tokens_path(self) -> Path:
        return self.data_dir / self.tokens_filename


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens. "
            "Tokens are stored in plain JSON when omitted."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the credential service."""

    model_config = SettingsConfigDict(
        env_prefix="APP_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field("development")
    log_level: str = Field("INFO")
    log_file: Optional[Path] = Field(
        None,
        description="Optional log file, rotated daily. Relative paths resolve under the data dir.",
    )
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    def resolved_log_file(self) -> Optional[Path]:
        if self.log_file is None:
            return None
        if self.log_file.is_absolute():
            return self.log_file
        return self.storage.data_dir / self.log_file


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_SCOPES",
    "ProviderSettings",
    "SecuritySettings",
    "StorageSettings",
    "get_settings",
]
