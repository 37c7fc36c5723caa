"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from session_gateway.core.config import SessionSettings
from session_gateway.clients import MemoryKVStore
from session_gateway.services import SessionManager, SessionStore


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def session_settings() -> SessionSettings:
    return SessionSettings(ttl_seconds=86400, cookie_name="session_id")


@pytest.fixture
def kv_backend() -> MemoryKVStore:
    return MemoryKVStore()


@pytest.fixture
def session_manager(kv_backend: MemoryKVStore, session_settings: SessionSettings) -> SessionManager:
    return SessionManager(SessionStore(kv_backend), session_settings)
