"""Tests for session cookies and the GitHub OAuth routes."""

from __future__ import annotations

import json
import time
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, urlparse

import pytest

from chronalog.auth import github_oauth
from chronalog.auth.sessions import SESSION_COOKIE, create_session, verify_session
from chronalog.utils.crypto import _fernet, decrypt, encrypt

SECRET = "test-secret"
USER = {"login": "octocat", "name": "The Octocat", "email": "octo@example.com", "avatar_url": "https://a/1"}


# ---------------------------------------------------------------------------
# Crypto / sessions
# ---------------------------------------------------------------------------


def test_encrypt_round_trip():
    token = encrypt("hello", SECRET)
    assert token != "hello"
    assert decrypt(token, SECRET) == "hello"


def test_decrypt_with_wrong_key():
    assert decrypt(encrypt("hello", SECRET), "other-secret") is None


def test_session_round_trip():
    session = verify_session(create_session(USER, "gho_abc", SECRET), SECRET)
    assert session["login"] == "octocat"
    assert session["access_token"] == "gho_abc"
    assert session["avatar_url"] == "https://a/1"


def test_tampered_session():
    cookie = create_session(USER, "gho_abc", SECRET)
    tampered = cookie[:-4] + ("AAAA" if not cookie.endswith("AAAA") else "BBBB")
    assert verify_session(tampered, SECRET) is None


def test_expired_session():
    payload = json.dumps({"login": "octocat", "access_token": "gho_abc"}).encode()
    old = _fernet(SECRET).encrypt_at_time(payload, int(time.time()) - 25 * 3600).decode()
    assert verify_session(old, SECRET) is None


def test_session_without_login():
    assert verify_session(encrypt(json.dumps({"name": "x"}), SECRET), SECRET) is None
    assert verify_session(encrypt("not json", SECRET), SECRET) is None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_me_anonymous(client):
    resp = await client.get("/api/auth/me")
    assert resp.json() == {"user": None}


@pytest.mark.asyncio
async def test_me_signed_in(admin_client):
    resp = await admin_client.get("/api/auth/me")
    user = resp.json()["user"]
    assert user["login"] == "octocat"
    assert "access_token" not in user


@pytest.mark.asyncio
async def test_logout_clears_cookie(admin_client):
    resp = await admin_client.post("/api/auth/logout")
    assert resp.json() == {"ok": True}
    assert f"{SESSION_COOKIE}=" in resp.headers["set-cookie"]
    assert "Max-Age=0" in resp.headers["set-cookie"]


@pytest.mark.asyncio
async def test_login_redirects_to_github(client):
    resp = await client.get("/api/auth/github/login")
    assert resp.status_code == 307

    location = urlparse(resp.headers["location"])
    assert f"{location.scheme}://{location.netloc}{location.path}" == github_oauth.GITHUB_AUTHORIZE_URL
    state = parse_qs(location.query)["state"][0]
    assert state in github_oauth._oauth_states
    github_oauth._oauth_states.pop(state)


@pytest.mark.asyncio
async def test_callback_rejects_unknown_state(client):
    resp = await client.get("/api/auth/github/callback", params={"code": "c", "state": "bogus"})
    assert resp.status_code == 307
    assert resp.headers["location"].endswith("/login?error=invalid_state")


def _mock_github_http(token_json: dict, user_json: dict | None = None):
    """Patch httpx.AsyncClient used by the callback."""
    http = MagicMock()
    http.post = AsyncMock(return_value=MagicMock(json=MagicMock(return_value=token_json)))
    http.get = AsyncMock(return_value=MagicMock(json=MagicMock(return_value=user_json or {})))
    http.__aenter__ = AsyncMock(return_value=http)
    http.__aexit__ = AsyncMock(return_value=False)
    return patch("chronalog.auth.github_oauth.httpx.AsyncClient", return_value=http)


@pytest.mark.asyncio
async def test_callback_sets_session_cookie(client):
    github_oauth._oauth_states["good-state"] = True

    with _mock_github_http({"access_token": "gho_new"}, USER), \
            patch.object(github_oauth, "_check_collaborator", return_value=True):
        resp = await client.get("/api/auth/github/callback", params={"code": "c", "state": "good-state"})

    assert resp.status_code == 302
    assert SESSION_COOKIE in resp.cookies
    assert "good-state" not in github_oauth._oauth_states


@pytest.mark.asyncio
async def test_callback_token_failure(client):
    github_oauth._oauth_states["s2"] = True
    with _mock_github_http({"error": "bad_verification_code"}):
        resp = await client.get("/api/auth/github/callback", params={"code": "c", "state": "s2"})
    assert resp.headers["location"].endswith("/login?error=token_failed")


@pytest.mark.asyncio
async def test_callback_rejects_non_collaborator(client):
    github_oauth._oauth_states["s3"] = True
    with _mock_github_http({"access_token": "gho_new"}, USER), \
            patch.object(github_oauth, "_check_collaborator", return_value=False):
        resp = await client.get("/api/auth/github/callback", params={"code": "c", "state": "s3"})
    assert resp.headers["location"].endswith("/login?error=not_collaborator")
    assert SESSION_COOKIE not in resp.cookies
