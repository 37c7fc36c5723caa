"""
GitHub OAuth utilities.

These helpers build the authorization redirect, protect it with a signed
``state`` value and perform the authorization-code grant followed by the
profile lookup.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from hashlib import sha256
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from session_gateway.core.config import GitHubSettings
from session_gateway.core.errors import (
    IdentityFetchFailed,
    InvalidStateError,
    TokenRequestFailed,
)
from session_gateway.models.session import Identity, IssuedToken

logger = logging.getLogger(__name__)


class OAuthStateEncoder:
    """Encode and decode OAuth state values to guard against tampering."""

    _SIGNATURE_BYTES = 32

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key.encode("utf-8")

    def issue(self, **extra: Any) -> str:
        """Mint a fresh state bound to a random nonce and the current instant."""
        payload = {
            "nonce": secrets.token_urlsafe(16),
            "issued_at": datetime.now(timezone.utc).isoformat(),
            **extra,
        }
        return self.encode(payload)

    def encode(self, payload: Dict[str, Any]) -> str:
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        signature = hmac.new(self._secret_key, serialized.encode("utf-8"), sha256).digest()
        encoded = base64.urlsafe_b64encode(signature + serialized.encode("utf-8"))
        # Unpadded so the value survives cookies and query strings unquoted.
        return encoded.decode("utf-8").rstrip("=")

    def decode(self, token: str) -> Dict[str, Any]:
        padded = token + "=" * (-len(token) % 4)
        try:
            decoded = base64.urlsafe_b64decode(padded.encode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            raise InvalidStateError("Malformed OAuth state.") from exc
        signature, serialized = decoded[: self._SIGNATURE_BYTES], decoded[self._SIGNATURE_BYTES :]
        expected_signature = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected_signature):
            raise InvalidStateError("Invalid OAuth state signature.")
        try:
            payload = json.loads(serialized)
        except ValueError as exc:
            raise InvalidStateError("Malformed OAuth state.") from exc
        if not isinstance(payload, dict):
            raise InvalidStateError("Malformed OAuth state.")
        return payload

    def verify(self, received: Optional[str], expected: Optional[str], *, ttl_seconds: int) -> Dict[str, Any]:
        """Check the callback ``state`` against the value remembered in the browser."""
        if not received or not expected:
            raise InvalidStateError("Missing OAuth state.")
        if not hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8")):
            raise InvalidStateError("OAuth state mismatch.")

        payload = self.decode(received)
        try:
            issued_at = datetime.fromisoformat(payload["issued_at"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidStateError("Invalid issued_at in OAuth state.") from exc
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        if datetime.now(timezone.utc) - issued_at > timedelta(seconds=ttl_seconds):
            raise InvalidStateError("OAuth state has expired.")
        return payload


@dataclass(frozen=True, slots=True)
class ExchangeResult:
    """Everything a successful authorization-code grant yields."""

    access_token: IssuedToken
    identity: Identity
    refresh_token: Optional[IssuedToken] = None


class GitHubOAuthClient:
    """Build GitHub authorization URLs and exchange authorization codes."""

    USER_AGENT = "github-session-gateway"

    def __init__(
        self,
        github_settings: GitHubSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._github = github_settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._github.http_timeout_seconds,
            transport=self._transport,
            headers={"User-Agent": self.USER_AGENT},
        )

    def build_authorization_url(self, state: str) -> str:
        """Construct the GitHub consent URL."""
        params = {
            "client_id": self._github.client_id,
            "scope": " ".join(self._github.scopes),
            "state": state,
        }
        if self._github.redirect_uri:
            params["redirect_uri"] = str(self._github.redirect_uri)
        return f"{self._github.authorize_url}?{urlencode(params)}"

    async def exchange(self, code: str) -> ExchangeResult:
        """
        Trade a one-time authorization code for tokens and the user's profile.

        Token expiry is fixed at the instant the token response is received.
        """
        if not code:
            raise TokenRequestFailed("Authorization code must not be empty.")

        payload = {
            "client_id": self._github.client_id,
            "client_secret": self._github.client_secret,
            "code": code,
        }
        if self._github.redirect_uri:
            payload["redirect_uri"] = str(self._github.redirect_uri)

        async with self._client() as client:
            try:
                response = await client.post(
                    self._github.token_url,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
            except httpx.HTTPError as exc:
                raise TokenRequestFailed(f"Token request failed: {exc}") from exc
            completed_at = datetime.now(timezone.utc)

            if response.status_code != httpx.codes.OK:
                raise TokenRequestFailed(response.text)
            try:
                token_payload = response.json()
            except ValueError as exc:
                raise TokenRequestFailed("Token endpoint returned invalid JSON.") from exc
            if not isinstance(token_payload, dict):
                raise TokenRequestFailed("Token endpoint returned a non-object payload.")

            access_token = token_payload.get("access_token")
            if not access_token:
                # GitHub answers 200 with an ``error`` field for bad codes.
                reason = token_payload.get("error_description") or token_payload.get("error")
                raise TokenRequestFailed(str(reason or "Token response missing access_token."))
            if not isinstance(access_token, str):
                raise TokenRequestFailed("Token response carries a non-string access_token.")

            try:
                issued_access = IssuedToken.from_lifetime(
                    access_token, token_payload.get("expires_in"), issued_at=completed_at
                )
                refresh_value = token_payload.get("refresh_token")
                refresh_token = (
                    IssuedToken.from_lifetime(
                        str(refresh_value),
                        token_payload.get("refresh_token_expires_in"),
                        issued_at=completed_at,
                    )
                    if refresh_value
                    else None
                )
            except (TypeError, ValueError, OverflowError) as exc:
                raise TokenRequestFailed("Token response carries an unusable lifetime.") from exc

            identity = await self._fetch_identity(client, access_token)

        logger.info("Exchanged authorization code for GitHub user %s", identity.login or identity.id)
        return ExchangeResult(
            access_token=issued_access,
            refresh_token=refresh_token,
            identity=identity,
        )

    async def fetch_identity(self, access_token: str) -> Identity:
        """Read the profile of the user owning ``access_token``."""
        async with self._client() as client:
            return await self._fetch_identity(client, access_token)

    async def _fetch_identity(self, client: httpx.AsyncClient, access_token: str) -> Identity:
        try:
            response = await client.get(
                self._github.user_url,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/vnd.github+json",
                },
            )
        except httpx.HTTPError as exc:
            raise IdentityFetchFailed(f"Profile request failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise IdentityFetchFailed(
                f"Profile endpoint answered {response.status_code}."
            )
        try:
            return Identity.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise IdentityFetchFailed("Profile response is not a usable identity.") from exc


__all__ = [
    "ExchangeResult",
    "GitHubOAuthClient",
    "OAuthStateEncoder",
]
