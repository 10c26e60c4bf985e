"""Symmetric encryption for token fields kept in the credential file."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from deviceflow.core.errors import TokenDecodeError


class TokenCipherService:
    """Seal and open token strings using a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def seal(self, token: str) -> str:
        """Encrypt a token and return the ciphertext as text."""
        return self._fernet.encrypt(token.encode("utf-8")).decode("utf-8")

    def open(self, sealed: str) -> str:
        """Decrypt a sealed token; a foreign or damaged ciphertext is a decode error."""
        try:
            plaintext = self._fernet.decrypt(sealed.encode("utf-8"))
        except InvalidToken as exc:
            raise TokenDecodeError(
                "Stored token could not be decrypted; wrong secret or damaged file."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["TokenCipherService"]
