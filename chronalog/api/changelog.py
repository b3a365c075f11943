"""Public changelog routes — read-only listing and entry lookup."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from chronalog.api.deps import get_changelog_service
from chronalog.models.common import ListResponse
from chronalog.services.changelog_service import (
    ChangelogService,
    filter_entries_by_tags,
    get_all_tags,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/changelog", tags=["changelog"])


@router.get("", response_model=ListResponse)
def list_entries(
    tags: str | None = None,
    service: ChangelogService = Depends(get_changelog_service),
):
    """List entries newest first, optionally filtered by comma-separated tags."""
    entries = service.list_entries()
    if tags:
        entries = filter_entries_by_tags(entries, tags.split(","))
    return ListResponse(items=[e.to_front_matter() for e in entries], total=len(entries))


@router.get("/tags")
def list_tags(service: ChangelogService = Depends(get_changelog_service)):
    """Tags in use across all entries."""
    return {"tags": get_all_tags(service.list_entries())}


@router.get("/{slug}")
def get_entry(slug: str, service: ChangelogService = Depends(get_changelog_service)):
    return service.read_entry(slug).to_front_matter()
