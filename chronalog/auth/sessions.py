"""Stateless sessions: an encrypted cookie carrying the GitHub login and token."""

from __future__ import annotations

import json

from chronalog.utils.crypto import decrypt, encrypt

SESSION_COOKIE = "chronalog_session"
SESSION_TTL_HOURS = 24


def create_session(user: dict, access_token: str, secret_key: str) -> str:
    """Encrypted cookie value for a signed-in user."""
    payload = {
        "login": user["login"],
        "name": user.get("name"),
        "email": user.get("email"),
        "avatar_url": user.get("avatar_url"),
        "access_token": access_token,
    }
    return encrypt(json.dumps(payload), secret_key)


def verify_session(cookie: str, secret_key: str) -> dict | None:
    """Session payload, or None if the cookie is invalid or expired."""
    plaintext = decrypt(cookie, secret_key, ttl=SESSION_TTL_HOURS * 3600)
    if plaintext is None:
        return None
    try:
        session = json.loads(plaintext)
    except json.JSONDecodeError:
        return None
    if not isinstance(session, dict) or not session.get("login"):
        return None
    return session
