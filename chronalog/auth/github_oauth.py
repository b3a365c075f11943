"""GitHub OAuth flow for the changelog admin."""

from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse

from chronalog.auth.sessions import SESSION_COOKIE, SESSION_TTL_HOURS, create_session
from chronalog.config import settings
from chronalog.services.github_service import GitHubService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# In-memory CSRF state store (use Redis in production)
_oauth_states: dict[str, bool] = {}

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"


def _check_collaborator(access_token: str, login: str) -> bool:
    repo = settings.repository()
    if not repo:
        # No repository configured: any GitHub account may sign in
        return True
    github = GitHubService(access_token)
    try:
        return github.is_collaborator(repo, login)
    finally:
        github.close()


@router.get("/github/login")
async def github_login():
    """Redirect to GitHub OAuth authorization page."""
    state = secrets.token_urlsafe(32)
    _oauth_states[state] = True

    params = {
        "client_id": settings.github_client_id,
        "redirect_uri": f"{settings.app_base_url}/api/auth/github/callback",
        "scope": "repo read:user",
        "state": state,
    }
    return RedirectResponse(f"{GITHUB_AUTHORIZE_URL}?{urlencode(params)}")


def _login_error(reason: str) -> RedirectResponse:
    return RedirectResponse(f"{settings.frontend_url}/login?error={reason}")


async def _exchange_code(client: httpx.AsyncClient, code: str) -> str | None:
    """Trade an authorization code for a user access token."""
    resp = await client.post(
        GITHUB_TOKEN_URL,
        data={
            "client_id": settings.github_client_id,
            "client_secret": settings.github_client_secret,
            "code": code,
        },
        headers={"Accept": "application/json"},
    )
    payload = resp.json()
    if not payload.get("access_token"):
        logger.warning("GitHub token exchange failed: %s", payload.get("error"))
        return None
    return payload["access_token"]


async def _fetch_user(client: httpx.AsyncClient, access_token: str) -> dict:
    resp = await client.get(
        GITHUB_USER_URL,
        headers={"Authorization": f"Bearer {access_token}", "Accept": "application/vnd.github+json"},
    )
    return resp.json()


@router.get("/github/callback")
async def github_callback(code: str, state: str):
    """Finish sign-in: verify state, resolve the user, set the session cookie."""
    if _oauth_states.pop(state, None) is None:
        return _login_error("invalid_state")

    async with httpx.AsyncClient() as client:
        access_token = await _exchange_code(client, code)
        if not access_token:
            return _login_error("token_failed")
        github_user = await _fetch_user(client, access_token)

    login = github_user["login"]
    if not await run_in_threadpool(_check_collaborator, access_token, login):
        logger.info("Rejected sign-in for %s: not a collaborator", login)
        return _login_error("not_collaborator")

    logger.info("Signed in %s", login)
    redirect = RedirectResponse(f"{settings.frontend_url}/", status_code=302)
    redirect.set_cookie(
        key=SESSION_COOKIE,
        value=create_session(github_user, access_token, settings.app_secret_key),
        httponly=True,
        samesite="lax",
        max_age=SESSION_TTL_HOURS * 3600,
        secure=not settings.app_base_url.startswith("http://localhost"),
    )
    return redirect


@router.get("/me")
async def get_current_user(request: Request):
    """Get the currently authenticated user."""
    user = getattr(request.state, "user", None)
    if not user:
        return {"user": None}
    return {
        "user": {
            "login": user["login"],
            "name": user.get("name"),
            "email": user.get("email"),
            "avatar_url": user.get("avatar_url"),
        }
    }


@router.post("/logout")
async def logout():
    """Clear the session cookie."""
    response = JSONResponse({"ok": True})
    response.delete_cookie(SESSION_COOKIE)
    return response
