"""
Session store adapter.

Wraps a synchronous key-value backend behind awaitable get/put/delete calls
and owns the JSON wire format of a session record.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, Optional, Protocol, TypeVar

from pydantic import ValidationError

from session_gateway.core.errors import StoreCorruptError
from session_gateway.models.session import Session
from session_gateway.services.token_cipher import TokenCipherService

T = TypeVar("T")

_TOKEN_FIELDS = ("accessToken", "refreshToken")


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...

    def put(self, key: str, value: bytes, ttl_seconds: int) -> None: ...

    def delete(self, key: str) -> None: ...


class SessionCodec:
    """Serialize sessions to JSON bytes with stable field names.

    When a cipher is configured the ``token`` value of each stored token is
    encrypted; field names and expiry stay readable.
    """

    def __init__(self, cipher: Optional[TokenCipherService] = None) -> None:
        self._cipher = cipher

    def encode(self, session: Session) -> bytes:
        record = session.model_dump(mode="json", by_alias=True, exclude_none=True)
        if self._cipher is not None:
            for field in _TOKEN_FIELDS:
                if field in record:
                    record[field]["token"] = self._cipher.encrypt(record[field]["token"])
        return json.dumps(record, separators=(",", ":")).encode("utf-8")

    def decode(self, raw: bytes) -> Session:
        try:
            record = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise StoreCorruptError("Stored session is not valid JSON.") from exc
        if not isinstance(record, dict):
            raise StoreCorruptError("Stored session is not a JSON object.")

        if self._cipher is not None:
            record = self._decrypt_tokens(record, self._cipher)

        try:
            return Session.model_validate(record)
        except ValidationError as exc:
            raise StoreCorruptError(
                f"Stored session has an unexpected shape: {exc.error_count()} error(s)."
            ) from exc

    @staticmethod
    def _decrypt_tokens(
        record: Dict[str, Any], cipher: TokenCipherService
    ) -> Dict[str, Any]:
        for field in _TOKEN_FIELDS:
            token = record.get(field)
            if token is None:
                continue
            if not isinstance(token, dict) or not isinstance(token.get("token"), str):
                raise StoreCorruptError(f"Stored {field} has an unexpected shape.")
            try:
                record[field] = {**token, "token": cipher.decrypt(token["token"])}
            except ValueError as exc:
                raise StoreCorruptError(f"Stored {field} cannot be decrypted.") from exc
        return record


class SessionStore:
    """Awaitable session persistence keyed by session identifier."""

    def __init__(self, backend: KeyValueBackend, codec: Optional[SessionCodec] = None) -> None:
        self._backend = backend
        self._codec = codec or SessionCodec()

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(func, *args)

    async def get(self, key: str) -> Optional[bytes]:
        return await self._run(self._backend.get, key)

    async def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        await self._run(self._backend.put, key, value, ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._run(self._backend.delete, key)

    async def load(self, session_id: str) -> Optional[Session]:
        """Return the stored session, ``None`` when the key is unknown or evicted."""
        raw = await self.get(session_id)
        if raw is None:
            return None
        return self._codec.decode(raw)

    async def save(self, session_id: str, session: Session, *, ttl_seconds: int) -> None:
        await self.put(session_id, self._codec.encode(session), ttl_seconds)


__all__ = ["KeyValueBackend", "SessionCodec", "SessionStore"]
