from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from session_gateway.clients import MemoryKVStore
from session_gateway.core.config import SessionSettings
from session_gateway.core.errors import (
    AuthError,
    NoSessionError,
    SessionExpiredError,
    StoreUnavailableError,
)
from session_gateway.models import Identity, IssuedToken
from session_gateway.services import SessionManager, SessionStore


def _in(seconds: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)


class FlakyDeleteBackend(MemoryKVStore):
    def delete(self, key: str) -> None:
        raise StoreUnavailableError("delete timed out")


class RecordingBackend(MemoryKVStore):
    def __init__(self) -> None:
        super().__init__()
        self.ttls: list[int] = []

    def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self.ttls.append(ttl_seconds)
        super().put(key, value, ttl_seconds)


@pytest.mark.asyncio
async def test_login_then_validate_returns_same_identity(session_manager: SessionManager) -> None:
    identity = Identity(id="42", login="octocat")

    session_id = await session_manager.login(identity, IssuedToken("tok1", _in(3600)))
    session = await session_manager.validate(session_id)

    assert session.identity == identity
    assert session.access_token.token == "tok1"
    assert session.refresh_token is None


@pytest.mark.asyncio
async def test_session_ids_are_long_and_unique(session_manager: SessionManager) -> None:
    identity = Identity(id="42")
    ids = {
        await session_manager.login(identity, IssuedToken("tok", _in(60)))
        for _ in range(20)
    }

    assert len(ids) == 20
    assert all(len(session_id) >= 32 for session_id in ids)


@pytest.mark.asyncio
async def test_login_persists_with_configured_ttl() -> None:
    backend = RecordingBackend()
    manager = SessionManager(SessionStore(backend), SessionSettings(ttl_seconds=120))

    await manager.login(Identity(id="1"), IssuedToken("tok", _in(60)))

    assert backend.ttls == [120]
    assert manager.ttl_seconds == 120


@pytest.mark.asyncio
async def test_token_without_lifetime_lives_as_long_as_the_session() -> None:
    manager = SessionManager(SessionStore(MemoryKVStore()), SessionSettings(ttl_seconds=600))
    before = datetime.now(timezone.utc)

    session_id = await manager.login(
        Identity(id="1"), IssuedToken("tok"), refresh_token=IssuedToken("refresh")
    )
    session = await manager.validate(session_id)

    for token in (session.access_token, session.refresh_token):
        assert token is not None
        assert before + timedelta(seconds=599) <= token.expires_at
        assert token.expires_at <= datetime.now(timezone.utc) + timedelta(seconds=600)


@pytest.mark.asyncio
async def test_validate_after_logout_fails_with_no_session(session_manager: SessionManager) -> None:
    session_id = await session_manager.login(Identity(id="42"), IssuedToken("tok1", _in(3600)))

    await session_manager.logout(session_id)

    with pytest.raises(NoSessionError):
        await session_manager.validate(session_id)


@pytest.mark.asyncio
async def test_logout_is_idempotent(session_manager: SessionManager) -> None:
    session_id = await session_manager.login(Identity(id="42"), IssuedToken("tok1", _in(3600)))

    await session_manager.logout(session_id)
    await session_manager.logout(session_id)


@pytest.mark.asyncio
@pytest.mark.parametrize("session_id", [None, ""])
async def test_logout_without_identifier_fails(session_manager: SessionManager, session_id) -> None:
    with pytest.raises(NoSessionError):
        await session_manager.logout(session_id)


@pytest.mark.asyncio
@pytest.mark.parametrize("session_id", [None, "", "never-issued"])
async def test_validate_rejects_absent_or_unknown_identifier(
    session_manager: SessionManager, session_id
) -> None:
    with pytest.raises(NoSessionError):
        await session_manager.validate(session_id)


@pytest.mark.asyncio
async def test_validate_rejects_expired_session_still_held_by_store(
    session_manager: SessionManager, kv_backend: MemoryKVStore
) -> None:
    session_id = await session_manager.login(Identity(id="42"), IssuedToken("tok1", _in(-1)))

    assert kv_backend.get(session_id) is not None
    with pytest.raises(SessionExpiredError):
        await session_manager.validate(session_id)


@pytest.mark.asyncio
async def test_validate_uses_the_check_instant(session_manager: SessionManager) -> None:
    session_id = await session_manager.login(Identity(id="42"), IssuedToken("tok1", _in(3600)))

    await session_manager.validate(session_id, now=_in(3500))
    with pytest.raises(SessionExpiredError):
        await session_manager.validate(session_id, now=_in(3700))


@pytest.mark.asyncio
async def test_login_rotates_prior_session(session_manager: SessionManager) -> None:
    identity = Identity(id="42")
    first = await session_manager.login(identity, IssuedToken("tok1", _in(3600)))
    second = await session_manager.login(
        identity, IssuedToken("tok2", _in(3600)), prior_session_id=first
    )
    third = await session_manager.login(
        identity, IssuedToken("tok3", _in(3600)), prior_session_id=second
    )

    assert len({first, second, third}) == 3
    for stale in (first, second):
        with pytest.raises(NoSessionError):
            await session_manager.validate(stale)
    assert (await session_manager.validate(third)).access_token.token == "tok3"


@pytest.mark.asyncio
async def test_failed_rotation_delete_does_not_block_login(session_settings: SessionSettings) -> None:
    manager = SessionManager(SessionStore(FlakyDeleteBackend()), session_settings)

    session_id = await manager.login(
        Identity(id="42"), IssuedToken("tok1", _in(3600)), prior_session_id="stale-id"
    )

    assert (await manager.validate(session_id)).identity.id == "42"


@pytest.mark.asyncio
async def test_current_user_projects_identity(session_manager: SessionManager) -> None:
    identity = Identity(id="42", name="Mona")
    session_id = await session_manager.login(identity, IssuedToken("tok1", _in(3600)))

    assert await session_manager.current_user(session_id) == identity


@pytest.mark.asyncio
async def test_current_user_fails_like_validate(session_manager: SessionManager) -> None:
    with pytest.raises(AuthError):
        await session_manager.current_user("unknown")
