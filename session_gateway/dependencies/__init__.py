"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_github_oauth_client,
    get_kv_backend,
    get_oauth_state_encoder,
    get_session_manager,
    get_session_store,
    get_token_cipher_service,
)
from .config import (
    SessionSettingsDependency,
    SettingsDependency,
    get_app_settings,
    get_session_settings,
)

__all__ = [
    "SessionSettingsDependency",
    "SettingsDependency",
    "get_app_settings",
    "get_github_oauth_client",
    "get_kv_backend",
    "get_oauth_state_encoder",
    "get_session_manager",
    "get_session_settings",
    "get_session_store",
    "get_token_cipher_service",
]
