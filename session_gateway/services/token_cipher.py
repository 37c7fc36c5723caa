"""Symmetric encryption of token values kept inside stored sessions."""

from __future__ import annotations

import base64
from typing import Sequence

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

_KDF_INFO = b"session-gateway/token-encryption"


def _derive_key(secret: str) -> bytes:
    hkdf = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=_KDF_INFO)
    return base64.urlsafe_b64encode(hkdf.derive(secret.encode("utf-8")))


class TokenCipherService:
    """Encrypt and decrypt token strings with keys derived from configured secrets.

    The first secret encrypts; every secret is tried on decryption, so a new
    secret can be prepended without invalidating sessions written under the
    old one.
    """

    def __init__(self, *, secrets: Sequence[str]) -> None:
        keys = [secret for secret in secrets if secret]
        if not keys:
            raise ValueError("At least one token encryption secret must be provided.")
        self._fernet = MultiFernet([Fernet(_derive_key(secret)) for secret in keys])

    @classmethod
    def from_setting(cls, value: str) -> "TokenCipherService":
        """Build from a comma-separated ``TOKEN_ENCRYPTION_SECRET`` value."""
        return cls(secrets=[part.strip() for part in value.split(",")])

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt token; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["TokenCipherService"]
