"""Shared test fixtures for Chronalog."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from chronalog.config import Settings
from chronalog.services.changelog_service import ChangelogService
from chronalog.services.storage import LocalChangelogStore

FIXED_NOW = datetime(2024, 6, 1, 9, 30, 15, 250000, tzinfo=timezone.utc)


def write_entry(directory: Path, filename: str, title: str, date: str, **fields) -> None:
    """Drop a hand-written entry document into a changelog directory."""
    lines = [f"title: {title}", f'date: "{date}"']
    for key, value in fields.items():
        if isinstance(value, list):
            lines.append(f"{key}:")
            lines.extend(f'  - "{item}"' for item in value)
        else:
            lines.append(f"{key}: {value}")
    directory.mkdir(parents=True, exist_ok=True)
    (directory / filename).write_text("---\n" + "\n".join(lines) + "\n---\n\nBody of " + title)


# ---------------------------------------------------------------------------
# Settings / storage fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Local backend rooted at a temporary directory, without git commits."""
    return Settings(
        storage_backend="local",
        repo_path=str(tmp_path),
        changelog_dir="chronalog/changelog",
        config_dir="chronalog",
        auto_commit=False,
        github_repo="",
        github_remote_url="",
    )


@pytest.fixture
def changelog_dir(tmp_path) -> Path:
    return tmp_path / "chronalog" / "changelog"


@pytest.fixture
def local_store(test_settings) -> LocalChangelogStore:
    return LocalChangelogStore(test_settings.repo_path, test_settings.changelog_dir, auto_commit=False)


@pytest.fixture
def service(local_store, test_settings) -> ChangelogService:
    return ChangelogService(local_store, test_settings)


# ---------------------------------------------------------------------------
# App / client fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def app(test_settings):
    """FastAPI app whose dependencies use the temporary local store."""
    from chronalog.api.deps import get_settings
    from chronalog.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_settings] = lambda: test_settings
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client without a session."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def session_cookie() -> str:
    from chronalog.auth.sessions import create_session
    from chronalog.config import settings

    user = {"login": "octocat", "name": "The Octocat", "email": "octocat@example.com"}
    return create_session(user, "gho_testtoken", settings.app_secret_key)


@pytest_asyncio.fixture
async def admin_client(app, session_cookie):
    """Async HTTP client carrying a valid session cookie."""
    from chronalog.auth.sessions import SESSION_COOKIE

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={SESSION_COOKIE: session_cookie},
    ) as ac:
        yield ac
