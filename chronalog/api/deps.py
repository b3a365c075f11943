"""FastAPI dependencies wiring settings, stores and services together."""

from __future__ import annotations

from typing import Iterator

from fastapi import Depends, Request

from chronalog.config import Settings, settings
from chronalog.services.changelog_service import ChangelogService
from chronalog.services.storage import ChangelogStore, build_store
from chronalog.services.tags_service import PredefinedTagsService


def get_settings() -> Settings:
    return settings


def _session_identity(request: Request) -> dict:
    user = getattr(request.state, "user", None) or {}
    return {
        "access_token": user.get("access_token"),
        "author_name": user.get("name") or user.get("login"),
        "author_email": user.get("email"),
    }


def get_store(request: Request, cfg: Settings = Depends(get_settings)) -> Iterator[ChangelogStore]:
    """Changelog store acting as the signed-in user when there is one.

    Closed once the response is sent, releasing any GitHub client it holds.
    """
    store = build_store(cfg, **_session_identity(request))
    try:
        yield store
    finally:
        store.close()


def get_changelog_service(
    store: ChangelogStore = Depends(get_store), cfg: Settings = Depends(get_settings)
) -> ChangelogService:
    return ChangelogService(store, cfg)


def get_tags_service(
    request: Request, cfg: Settings = Depends(get_settings)
) -> Iterator[PredefinedTagsService]:
    store = build_store(cfg, directory=cfg.config_dir, **_session_identity(request))
    try:
        yield PredefinedTagsService(store)
    finally:
        store.close()
