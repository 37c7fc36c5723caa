"""
Session lifecycle: issue, rotate, validate and tear down server-side sessions.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from session_gateway.core.config import SessionSettings
from session_gateway.core.errors import NoSessionError, SessionExpiredError, StoreError
from session_gateway.core.logging import fingerprint
from session_gateway.models.session import Identity, IssuedToken, Session, Token
from session_gateway.services.session_store import SessionStore

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    """Mint an unguessable session identifier (256 bits of randomness)."""
    return secrets.token_urlsafe(32)


class SessionManager:
    """Orchestrates sessions over a :class:`SessionStore`.

    Every successful login mints a new identifier, so the most recent login
    is always the one reachable by the client's cookie. Expiry is enforced on
    read against the stored access-token instant rather than trusting the
    store's eviction.
    """

    def __init__(self, store: SessionStore, settings: SessionSettings) -> None:
        self._store = store
        self._settings = settings

    @property
    def ttl_seconds(self) -> int:
        return self._settings.ttl_seconds

    async def login(
        self,
        identity: Identity,
        access_token: IssuedToken,
        refresh_token: Optional[IssuedToken] = None,
        prior_session_id: Optional[str] = None,
    ) -> str:
        """Persist a fresh session and return its identifier."""
        if prior_session_id:
            try:
                await self._store.delete(prior_session_id)
            except StoreError:
                # A stale entry left behind here still expires with its TTL.
                logger.warning(
                    "Could not delete prior session %s during rotation",
                    fingerprint(prior_session_id),
                    exc_info=True,
                )
            else:
                logger.info("Rotated out prior session %s", fingerprint(prior_session_id))

        session_lifetime_end = datetime.now(timezone.utc) + timedelta(
            seconds=self._settings.ttl_seconds
        )
        session = Session(
            identity=identity,
            access_token=Token.bind(access_token, fallback_expiry=session_lifetime_end),
            refresh_token=(
                Token.bind(refresh_token, fallback_expiry=session_lifetime_end)
                if refresh_token is not None
                else None
            ),
        )

        session_id = new_session_id()
        await self._store.save(session_id, session, ttl_seconds=self._settings.ttl_seconds)
        logger.info(
            "Issued session %s for user %s",
            fingerprint(session_id),
            identity.login or identity.id,
        )
        return session_id

    async def validate(self, session_id: Optional[str], *, now: Optional[datetime] = None) -> Session:
        """Return the live session for ``session_id`` or raise an :class:`AuthError`."""
        if not session_id:
            raise NoSessionError("No session identifier presented.")

        session = await self._store.load(session_id)
        if session is None:
            raise NoSessionError("Unknown session identifier.")
        if session.is_expired(now):
            logger.info("Rejected expired session %s", fingerprint(session_id))
            raise SessionExpiredError("Session access token has expired.")
        return session

    async def logout(self, session_id: Optional[str]) -> None:
        """Delete the session; deleting an already-absent key is not an error."""
        if not session_id:
            raise NoSessionError("Not logged in")
        await self._store.delete(session_id)
        logger.info("Deleted session %s", fingerprint(session_id))

    async def current_user(self, session_id: Optional[str]) -> Identity:
        session = await self.validate(session_id)
        return session.identity


__all__ = ["SessionManager", "new_session_id"]
