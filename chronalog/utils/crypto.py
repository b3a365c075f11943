"""Encryption utilities for the session cookie (holds the GitHub token)."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken


def _fernet(secret_key: str) -> Fernet:
    # Fernet keys must be 32 url-safe base64 bytes
    key_bytes = hashlib.sha256(secret_key.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(key_bytes))


def encrypt(plaintext: str, secret_key: str) -> str:
    """Encrypt a string and return base64-encoded ciphertext."""
    return _fernet(secret_key).encrypt(plaintext.encode()).decode()


def decrypt(ciphertext: str, secret_key: str, ttl: int | None = None) -> str | None:
    """Decrypt ciphertext; None when it is tampered with or older than ``ttl`` seconds."""
    try:
        return _fernet(secret_key).decrypt(ciphertext.encode(), ttl=ttl).decode()
    except InvalidToken:
        return None
