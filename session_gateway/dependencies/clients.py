"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Optional

from session_gateway.clients import (
    DynamoDBKVStore,
    GitHubOAuthClient,
    MemoryKVStore,
    OAuthStateEncoder,
    SQLiteKVStore,
)
from session_gateway.core.config import get_settings
from session_gateway.services import (
    KeyValueBackend,
    SessionCodec,
    SessionManager,
    SessionStore,
    TokenCipherService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_oauth_state_encoder() -> OAuthStateEncoder:
    """Provide an OAuth state encoder derived from the GitHub client secret."""
    settings = _settings()
    return OAuthStateEncoder(secret_key=settings.github.client_secret)


@lru_cache()
def get_github_oauth_client() -> GitHubOAuthClient:
    """Create a singleton GitHub OAuth client."""
    settings = _settings()
    return GitHubOAuthClient(settings.github)


@lru_cache()
def get_token_cipher_service() -> Optional[TokenCipherService]:
    """Provide token encryption when a secret is configured."""
    secret = _settings().security.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService.from_setting(secret)


@lru_cache()
def get_kv_backend() -> KeyValueBackend:
    """Provide the configured key-value backend."""
    store_settings = _settings().store
    if store_settings.backend == "memory":
        return MemoryKVStore()
    if store_settings.backend == "dynamodb":
        return DynamoDBKVStore(store_settings)
    return SQLiteKVStore(store_settings.sqlite_path)


@lru_cache()
def get_session_store() -> SessionStore:
    """Provide the session store adapter over the configured backend."""
    return SessionStore(get_kv_backend(), SessionCodec(get_token_cipher_service()))


@lru_cache()
def get_session_manager() -> SessionManager:
    """Provide the process-wide session manager."""
    return SessionManager(get_session_store(), _settings().session)


__all__ = [
    "get_github_oauth_client",
    "get_kv_backend",
    "get_oauth_state_encoder",
    "get_session_manager",
    "get_session_store",
    "get_token_cipher_service",
]
