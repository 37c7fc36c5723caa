"""Schemas for the authentication endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from session_gateway.models.session import Identity


class ErrorBody(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Structured error envelope returned by every failing endpoint."""

    error: ErrorBody


class MessageResponse(BaseModel):
    message: str


class AuthorizationResponse(BaseModel):
    """Returned to non-browser clients starting the OAuth flow."""

    authorization_url: str = Field(..., description="GitHub consent URL to open.")
    state: str = Field(..., description="Opaque state token echoed back by GitHub.")


class MeResponse(BaseModel):
    user: Identity


__all__ = [
    "AuthorizationResponse",
    "ErrorBody",
    "ErrorResponse",
    "MeResponse",
    "MessageResponse",
]
