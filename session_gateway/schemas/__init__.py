"""Public schema exports."""

from .auth import (
    AuthorizationResponse,
    ErrorBody,
    ErrorResponse,
    MeResponse,
    MessageResponse,
)

__all__ = [
    "AuthorizationResponse",
    "ErrorBody",
    "ErrorResponse",
    "MeResponse",
    "MessageResponse",
]
