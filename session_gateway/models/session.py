"""
Domain models for the server-side session record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def to_epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """A token as handed out by the provider, before it is bound to a session.

    ``expires_at`` is ``None`` when the provider reported no lifetime; the
    session manager then bounds it by the session's own time-to-live.
    """

    value: str
    expires_at: Optional[datetime] = None

    @classmethod
    def from_lifetime(
        cls, value: str, lifetime_seconds: Any, *, issued_at: datetime
    ) -> "IssuedToken":
        if lifetime_seconds in (None, ""):
            return cls(value=value)
        return cls(
            value=value,
            expires_at=issued_at + timedelta(seconds=int(lifetime_seconds)),
        )


class Token(BaseModel):
    """Token value plus absolute expiry, as persisted in the store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str
    expiration_time: int = Field(
        ..., alias="expirationTime", description="Absolute expiry in epoch milliseconds."
    )

    @classmethod
    def bind(cls, issued: IssuedToken, *, fallback_expiry: datetime) -> "Token":
        """Fix the expiry of an issued token, defaulting to ``fallback_expiry``."""
        expires_at = issued.expires_at or fallback_expiry
        return cls(token=issued.value, expiration_time=to_epoch_ms(expires_at))

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.expiration_time / 1000, tz=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        current = now or datetime.now(timezone.utc)
        return self.expiration_time < to_epoch_ms(current)


class Identity(BaseModel):
    """The retained subset of the provider's user profile."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    login: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_numeric_id(cls, value: Any) -> Any:
        """GitHub reports numeric user ids; keep them as opaque strings."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class Session(BaseModel):
    """Identity and tokens held server-side for one session identifier."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    identity: Identity = Field(..., alias="user")
    access_token: Token = Field(..., alias="accessToken")
    refresh_token: Optional[Token] = Field(None, alias="refreshToken")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.access_token.is_expired(now)


__all__ = ["Identity", "IssuedToken", "Session", "Token", "to_epoch_ms"]
