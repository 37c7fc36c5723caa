"""Service layer exports."""

from .session_manager import SessionManager
from .session_store import KeyValueBackend, SessionCodec, SessionStore
from .token_cipher import TokenCipherService

__all__ = [
    "KeyValueBackend",
    "SessionCodec",
    "SessionManager",
    "SessionStore",
    "TokenCipherService",
]
