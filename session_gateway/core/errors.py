"""
Error taxonomy shared by the OAuth client, the session services and the
HTTP boundary.

Each family carries the HTTP status and the client-facing message it is
translated to in ``session_gateway.api.errors``.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for errors converted into ``{"error": {"message": ...}}`` responses."""

    status_code: int = 500
    public_message: str = "Internal server error"
    expose_detail: bool = False

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ExchangeError(GatewayError):
    """The identity provider rejected or failed the authorization-code exchange."""

    status_code = 400
    public_message = "Failed to login"


class TokenRequestFailed(ExchangeError):
    """Token endpoint returned an error or a payload without an access token."""


class IdentityFetchFailed(ExchangeError):
    """Profile endpoint could not be read with the freshly issued access token."""

    status_code = 500


class InvalidStateError(GatewayError):
    """OAuth ``state`` missing, tampered with, mismatched or stale."""

    status_code = 400
    public_message = "Invalid OAuth state"
    expose_detail = True


class AuthError(GatewayError):
    """Session validation failed; always reported to clients the same way."""

    status_code = 401
    public_message = "Unauthorized"


class NoSessionError(AuthError):
    """No session identifier was presented, or the store does not know it."""


class SessionExpiredError(AuthError):
    """The stored access token expired even though the store still holds the key."""


class StoreError(GatewayError):
    """The session store failed; fatal for the current request."""

    status_code = 500


class StoreCorruptError(StoreError):
    """Stored bytes are not a well-formed session record."""


class StoreUnavailableError(StoreError):
    """The backend raised, timed out or is misconfigured."""


__all__ = [
    "AuthError",
    "ExchangeError",
    "GatewayError",
    "IdentityFetchFailed",
    "InvalidStateError",
    "NoSessionError",
    "SessionExpiredError",
    "StoreCorruptError",
    "StoreError",
    "StoreUnavailableError",
    "TokenRequestFailed",
]
