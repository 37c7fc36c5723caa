"""
FastAPI routes for GitHub login, logout and the current-user lookup.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from session_gateway.api.errors import error_response
from session_gateway.api.gate import SessionDependency
from session_gateway.clients import GitHubOAuthClient, OAuthStateEncoder
from session_gateway.core.config import AppSettings, SessionSettings
from session_gateway.core.errors import NoSessionError, StoreError
from session_gateway.dependencies import (
    SettingsDependency,
    get_github_oauth_client,
    get_oauth_state_encoder,
    get_session_manager,
)
from session_gateway.schemas import AuthorizationResponse, MeResponse, MessageResponse
from session_gateway.services import SessionManager

router = APIRouter()
logger = logging.getLogger(__name__)

_STATE_COOKIE_PATH = "/auth/github"


def _wants_html(request: Request, redirect: bool) -> bool:
    accept_header = request.headers.get("accept", "")
    return redirect or "text/html" in accept_header.lower()


def _set_session_cookie(
    response: Response, session_id: str, settings: SessionSettings, *, max_age: int
) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=session_id,
        max_age=max_age,
        path=settings.cookie_path,
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.cookie_samesite,
    )


def _clear_session_cookie(response: Response, settings: SessionSettings) -> None:
    response.delete_cookie(
        key=settings.cookie_name,
        path=settings.cookie_path,
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.cookie_samesite,
    )


def _clear_state_cookie(response: Response, settings: AppSettings) -> None:
    response.delete_cookie(
        key=settings.oauth.state_cookie_name,
        path=_STATE_COOKIE_PATH,
        secure=settings.session.cookie_secure,
        httponly=True,
        samesite="lax",
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


def _start_authorization(
    request: Request,
    oauth_client: GitHubOAuthClient,
    state_encoder: OAuthStateEncoder,
    settings: AppSettings,
    redirect: bool,
) -> Response:
    """Mint a state value, remember it in the browser and point it at GitHub."""
    state = state_encoder.issue()
    authorization_url = oauth_client.build_authorization_url(state=state)

    response: Response
    if _wants_html(request, redirect):
        response = RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)
    else:
        body = AuthorizationResponse(authorization_url=authorization_url, state=state)
        response = JSONResponse(content=body.model_dump())

    # Lax is required: the callback arrives as a top-level navigation from github.com.
    response.set_cookie(
        key=settings.oauth.state_cookie_name,
        value=state,
        max_age=settings.oauth.state_ttl_seconds,
        path=_STATE_COOKIE_PATH,
        secure=settings.session.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/auth/github/login", status_code=HTTPStatus.OK, response_model=None)
async def github_login(
    request: Request,
    oauth_client: Annotated[GitHubOAuthClient, Depends(get_github_oauth_client)],
    state_encoder: Annotated[OAuthStateEncoder, Depends(get_oauth_state_encoder)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: SettingsDependency,
    code: Optional[str] = Query(default=None, description="Authorization code returned by GitHub."),
    state: Optional[str] = Query(default=None, description="OAuth state echoed back by GitHub."),
    error: Optional[str] = Query(default=None, description="Error reported by GitHub."),
    error_description: Optional[str] = Query(default=None),
    redirect: bool = Query(
        default=False,
        description="When true, respond with redirects instead of JSON.",
    ),
) -> Response:
    """
    Start the GitHub OAuth flow, or complete it when GitHub redirects back.

    On completion any session the caller already holds is rotated out and a
    new session cookie is issued.
    """
    if error:
        logger.warning("GitHub declined authorization: %s", error_description or error)
        response = error_response(HTTPStatus.BAD_REQUEST, "Failed to login")
        _clear_state_cookie(response, settings)
        return response

    if code is None:
        return _start_authorization(request, oauth_client, state_encoder, settings, redirect)

    if settings.oauth.verify_state:
        state_encoder.verify(
            state,
            request.cookies.get(settings.oauth.state_cookie_name),
            ttl_seconds=settings.oauth.state_ttl_seconds,
        )

    result = await oauth_client.exchange(code)
    session_id = await manager.login(
        result.identity,
        result.access_token,
        result.refresh_token,
        prior_session_id=request.cookies.get(settings.session.cookie_name),
    )

    response: Response
    if settings.frontend_base_url and _wants_html(request, redirect):
        response = RedirectResponse(
            url=str(settings.frontend_base_url),
            status_code=HTTPStatus.TEMPORARY_REDIRECT,
        )
    else:
        response = JSONResponse(
            content=MessageResponse(message="Successfully logged in").model_dump()
        )
    _set_session_cookie(response, session_id, settings.session, max_age=manager.ttl_seconds)
    _clear_state_cookie(response, settings)
    return response


@router.get("/auth/logout", status_code=HTTPStatus.OK, response_model=None)
async def logout(
    request: Request,
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: SettingsDependency,
) -> Response:
    """Delete the caller's session and clear the cookie holding its identifier."""
    session_id = request.cookies.get(settings.session.cookie_name)
    try:
        await manager.logout(session_id)
    except NoSessionError:
        return error_response(HTTPStatus.BAD_REQUEST, "Not logged in")
    except StoreError:
        # The cookie is still cleared; the orphaned entry expires with its TTL.
        logger.error("Failed to delete session during logout", exc_info=True)
        response = error_response(HTTPStatus.INTERNAL_SERVER_ERROR, StoreError.public_message)
        _clear_session_cookie(response, settings.session)
        return response

    response = JSONResponse(
        content=MessageResponse(message="Successfully logged out").model_dump()
    )
    _clear_session_cookie(response, settings.session)
    return response


@router.get("/me", response_model=MeResponse, response_model_exclude_none=True)
async def me(session: SessionDependency) -> MeResponse:
    """Return the identity bound to the caller's session."""
    return MeResponse(user=session.identity)


__all__ = ["router"]
