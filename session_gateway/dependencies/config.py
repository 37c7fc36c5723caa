"""
Settings dependencies.

Routes and the session gate read cookie and OAuth settings through these
functions. The session manager keeps the settings it was built with, so its
TTL changes only by overriding ``get_session_manager`` as well.
"""

from typing import Annotated

from fastapi import Depends

from session_gateway.core.config import AppSettings, SessionSettings, get_settings


def get_app_settings() -> AppSettings:
    return get_settings()


def get_session_settings(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> SessionSettings:
    """Cookie name, lifetime and attributes of the session cookie."""
    return settings.session


SettingsDependency = Annotated[AppSettings, Depends(get_app_settings)]
SessionSettingsDependency = Annotated[SessionSettings, Depends(get_session_settings)]

__all__ = [
    "SessionSettingsDependency",
    "SettingsDependency",
    "get_app_settings",
    "get_session_settings",
]
