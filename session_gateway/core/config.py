"""
Application configuration models and helpers.

Centralizes settings management so the HTTP layer, the session manager and
the store backends share one configuration surface. Session cookie name and
lifetime live here rather than in module constants so that deployments and
tests can vary them independently.
"""

from functools import lru_cache
from typing import Annotated, Literal, Optional

from pydantic import AnyHttpUrl, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _settings_config() -> SettingsConfigDict:
    return SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class GitHubSettings(BaseSettings):
    """Configuration required for the GitHub OAuth application."""

    model_config = _settings_config()

    client_id: str = Field(..., validation_alias="GITHUB_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="GITHUB_CLIENT_SECRET")
    redirect_uri: Optional[AnyHttpUrl] = Field(
        None,
        validation_alias="GITHUB_REDIRECT_URI",
        description="Callback URL registered with the OAuth app. GitHub falls back to the app default when omitted.",
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("read:user", "user:email"),
        validation_alias="GITHUB_OAUTH_SCOPES",
    )
    authorize_url: str = Field(
        "https://github.com/login/oauth/authorize",
        validation_alias="GITHUB_AUTHORIZE_URL",
    )
    token_url: str = Field(
        "https://github.com/login/oauth/access_token",
        validation_alias="GITHUB_TOKEN_URL",
    )
    user_url: str = Field(
        "https://api.github.com/user",
        validation_alias="GITHUB_USER_URL",
    )
    http_timeout_seconds: float = Field(10.0, validation_alias="GITHUB_HTTP_TIMEOUT")

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class SessionSettings(BaseSettings):
    """Session cookie and lifetime configuration."""

    model_config = _settings_config()

    cookie_name: str = Field("session_id", validation_alias="SESSION_COOKIE_NAME")
    ttl_seconds: int = Field(
        60 * 60 * 24,
        gt=0,
        validation_alias="SESSION_TTL_SECONDS",
        description="Store time-to-live and cookie Max-Age for a session.",
    )
    cookie_secure: bool = Field(True, validation_alias="SESSION_COOKIE_SECURE")
    cookie_samesite: Literal["lax", "strict", "none"] = Field(
        "none", validation_alias="SESSION_COOKIE_SAMESITE"
    )
    cookie_path: str = Field("/", validation_alias="SESSION_COOKIE_PATH")


class OAuthSettings(BaseSettings):
    """OAuth flow configuration."""

    model_config = _settings_config()

    state_ttl_seconds: int = Field(600, gt=0, validation_alias="OAUTH_STATE_TTL")
    state_cookie_name: str = Field(
        "oauth_state", validation_alias="OAUTH_STATE_COOKIE_NAME"
    )
    verify_state: bool = Field(True, validation_alias="OAUTH_VERIFY_STATE")


class StoreSettings(BaseSettings):
    """Selects and configures the key-value backend holding sessions."""

    model_config = _settings_config()

    backend: Literal["memory", "sqlite", "dynamodb"] = Field(
        "sqlite", validation_alias="SESSION_STORE_BACKEND"
    )
    sqlite_path: str = Field(
        "data/sessions.db", validation_alias="SESSION_STORE_SQLITE_PATH"
    )
    dynamodb_table_name: Optional[str] = Field(
        None, validation_alias="DYNAMODB_TABLE_NAME"
    )
    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = _settings_config()

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = _settings_config()

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    frontend_base_url: Optional[HttpUrl] = Field(
        None,
        validation_alias="FRONTEND_BASE_URL",
        description="Optional URL for redirecting browsers back to the front-end after login.",
    )
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GitHubSettings",
    "OAuthSettings",
    "SecuritySettings",
    "SessionSettings",
    "StoreSettings",
    "get_settings",
]
