"""Request gate rejecting callers without a valid session."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from session_gateway.dependencies import SessionSettingsDependency, get_session_manager
from session_gateway.models.session import Session
from session_gateway.services import SessionManager


async def require_session(
    request: Request,
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    session_settings: SessionSettingsDependency,
) -> Session:
    """Resolve the session cookie to a live session or raise ``AuthError`` (401)."""
    session_id = request.cookies.get(session_settings.cookie_name)
    return await manager.validate(session_id)


SessionDependency = Annotated[Session, Depends(require_session)]

__all__ = ["SessionDependency", "require_session"]
