"""Domain model exports."""

from .session import Identity, IssuedToken, Session, Token

__all__ = ["Identity", "IssuedToken", "Session", "Token"]
