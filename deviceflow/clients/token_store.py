"""File-backed storage for the single credential record."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from deviceflow.core.errors import TokenDecodeError, TokenStoreIOError
from deviceflow.models.credentials import CredentialRecord
from deviceflow.clients.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

_SEALED_FIELDS = ("access_token", "refresh_token")


class TokenStore:
    """Load, save and clear one JSON credential record at a fixed path."""

    def __init__(
        self, path: Path | str, *, cipher: Optional[TokenCipherService] = None
    ) -> None:
        self._path = Path(path)
        self._cipher = cipher

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[CredentialRecord]:
        """Return the stored record, or None when no token file exists."""
        try:
            raw_bytes = self._path.read_bytes()
        except FileNotFoundError:
            logger.info("No tokens file at %s", self._path)
            return None
        except OSError as exc:
            logger.error("Token file read error: %s", exc)
            raise TokenStoreIOError(f"Failed to read {self._path}: {exc}") from exc

        try:
            payload: Dict[str, Any] = json.loads(raw_bytes.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TokenDecodeError(f"Token file {self._path} is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise TokenDecodeError(f"Token file {self._path} must contain a JSON object.")

        if self._cipher is not None:
            for field in _SEALED_FIELDS:
                value = payload.get(field)
                if isinstance(value, str):
                    payload[field] = self._cipher.open(value)

        try:
            record = CredentialRecord.model_validate(payload)
        except ValidationError as exc:
            raise TokenDecodeError(f"Token file {self._path} is missing required fields.") from exc

        logger.info("Loaded tokens from %s", self._path)
        return record

    def save(self, record: CredentialRecord) -> None:
        """Replace the stored record, creating parent directories when needed."""
        payload = record.model_dump()
        if self._cipher is not None:
            for field in _SEALED_FIELDS:
                payload[field] = self._cipher.seal(payload[field])

        staging = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            staging.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            try:
                os.chmod(staging, 0o600)
            except OSError:  # pragma: no cover - platform dependent
                pass
            os.replace(staging, self._path)
        except OSError as exc:
            logger.error("Token file write error: %s", exc)
            raise TokenStoreIOError(f"Failed to write {self._path}: {exc}") from exc

        logger.info("Tokens saved to %s", self._path)

    def clear(self) -> None:
        """Delete the stored record; clearing an absent record is not an error."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise TokenStoreIOError(f"Failed to delete {self._path}: {exc}") from exc
        logger.info("Tokens cleared from %s", self._path)


__all__ = ["TokenStore"]
