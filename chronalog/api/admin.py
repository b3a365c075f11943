"""Admin API routes — authoring, requires a GitHub session."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query

from chronalog.api.deps import get_changelog_service, get_settings, get_store, get_tags_service
from chronalog.config import Settings
from chronalog.models.changelog import (
    HomeUrl,
    NextVersionResponse,
    PredefinedTags,
    SaveChangelogRequest,
    SaveChangelogResult,
)
from chronalog.services.changelog_service import ChangelogService, suggest_next_version
from chronalog.services.storage import ChangelogStore
from chronalog.services.tags_service import PredefinedTagsService
from chronalog.utils.mdx import generate_slug
from chronalog.utils.version import extract_version, is_valid_version, version_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/changelog", tags=["admin"])


@router.post("/save", response_model=SaveChangelogResult)
def save_entry(
    body: SaveChangelogRequest,
    service: ChangelogService = Depends(get_changelog_service),
):
    result = service.save_entry(body)
    logger.info("Saved changelog entry %s (committed=%s)", result.file_path, result.committed)
    return result


@router.get("/admin/next-version", response_model=NextVersionResponse)
def next_version(
    bump: Literal["major", "minor", "patch"] = "patch",
    service: ChangelogService = Depends(get_changelog_service),
):
    """Suggest the next version from the newest versioned entry."""
    current, suggested = suggest_next_version(service.list_entries(), bump)
    return NextVersionResponse(current=extract_version(current), next=suggested, bump=bump)


@router.get("/admin/slug")
def propose_slug(title: str, slug: str | None = None, version: str | None = None):
    """Slug and filename a save with these fields would use."""
    if slug or not version:
        proposed = generate_slug(title, slug)
        return {"slug": proposed, "filename": f"{proposed}.mdx", "valid_version": None}
    filename = version_filename(version)
    return {
        "slug": filename.removesuffix(".mdx"),
        "filename": filename,
        "valid_version": is_valid_version(version),
    }


@router.get("/admin/tags")
def get_predefined_tags(tags: PredefinedTagsService = Depends(get_tags_service)):
    return {"success": True, "tags": tags.read_tags()}


@router.post("/admin/tags")
def save_predefined_tags(
    body: PredefinedTags, tags: PredefinedTagsService = Depends(get_tags_service)
):
    saved = tags.save_tags(body.tags)
    return {"success": True, "tags": saved, "message": "Tags saved successfully"}


@router.get("/admin/home-url")
def get_home_url(
    tags: PredefinedTagsService = Depends(get_tags_service),
    cfg: Settings = Depends(get_settings),
):
    """Where the changelog page's home link points; falls back to the configured default."""
    return {"success": True, "homeUrl": tags.read_home_url(cfg.home_url)}


@router.post("/admin/home-url")
def save_home_url(body: HomeUrl, tags: PredefinedTagsService = Depends(get_tags_service)):
    saved = tags.save_home_url(body.home_url)
    return {"success": True, "homeUrl": saved, "message": "Home URL saved successfully"}


@router.get("/admin/commits")
def list_commits(
    limit: int = Query(50, ge=1, le=100),
    store: ChangelogStore = Depends(get_store),
):
    """Recent repository commits, for linking an entry to a commit hash."""
    return {"items": store.commit_history(limit)}
