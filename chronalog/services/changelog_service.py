"""Changelog orchestration — bridges the codec and a storage backend."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from chronalog.config import Settings
from chronalog.exceptions import ChangelogError, EntryNotFoundError, ValidationError
from chronalog.models.changelog import (
    ParsedChangelogEntry,
    SaveChangelogRequest,
    SaveChangelogResult,
)
from chronalog.services.storage import ChangelogStore, is_plain_filename
from chronalog.utils.mdx import (
    generate_slug,
    normalise_tags,
    parse_changelog_entry,
    serialise_changelog_entry,
    slug_from_filename,
)
from chronalog.utils.version import (
    BumpKind,
    increment_version,
    is_valid_version,
    version_filename,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(entry: ParsedChangelogEntry) -> datetime:
    try:
        moment = datetime.fromisoformat(entry.date)
    except ValueError:
        return _EPOCH
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def sort_entries(entries: list[ParsedChangelogEntry]) -> list[ParsedChangelogEntry]:
    """Newest first; undatable entries sink to the end."""
    return sorted(entries, key=_sort_key, reverse=True)


def filter_entries_by_tags(
    entries: list[ParsedChangelogEntry], tags: list[str]
) -> list[ParsedChangelogEntry]:
    """Entries sharing at least one tag with ``tags``. No tags means no filter."""
    wanted = set(normalise_tags(tags))
    if not wanted:
        return list(entries)
    return [e for e in entries if wanted.intersection(e.tags or [])]


def get_all_tags(entries: list[ParsedChangelogEntry]) -> list[str]:
    return sorted({tag for e in entries for tag in e.tags or []})


def latest_version(entries: list[ParsedChangelogEntry]) -> str | None:
    """Version of the newest entry carrying a valid semantic version."""
    for entry in sort_entries(entries):
        if entry.version and is_valid_version(entry.version):
            return entry.version
    return None


def suggest_next_version(
    entries: list[ParsedChangelogEntry], kind: BumpKind = "patch"
) -> tuple[str | None, str]:
    """(current, next) version; with no versioned entries, bump from 0.0.0."""
    current = latest_version(entries)
    return current, increment_version(current or "0.0.0", kind)


class ChangelogService:
    """Save, read and list changelog entries in a store."""

    def __init__(self, store: ChangelogStore, settings: Settings):
        self.store = store
        self.settings = settings

    def _filename_for(self, request: SaveChangelogRequest) -> str:
        if request.slug:
            field = "slug"
            filename = f"{generate_slug(request.title, request.slug)}.mdx"
        else:
            if not request.version or not request.version.strip():
                raise ValidationError("version")
            field = "version"
            filename = version_filename(request.version)

        if not is_plain_filename(filename):
            raise ValidationError(field, problem="Invalid value for field")
        return filename

    def _original_date(self, filename: str) -> str | None:
        content = self.store.read(filename)
        if content is None:
            return None
        try:
            return parse_changelog_entry(content, filename).date
        except ChangelogError as e:
            logger.warning("Failed to parse existing entry for date preservation: %s", e)
            return None

    def save_entry(
        self, request: SaveChangelogRequest, now: datetime | None = None
    ) -> SaveChangelogResult:
        """Serialise and persist an entry.

        New entries are named after their version; edits keep their slug and
        their original date.
        """
        filename = self._filename_for(request)

        if request.slug:
            original_date = self._original_date(filename)
            if original_date:
                request = request.model_copy(update={"date": original_date})

        content = serialise_changelog_entry(request, now=now)
        result = self.store.write(filename, content, self.settings.commit_message(request.title))

        if result.error:
            logger.warning("Saved %s without committing: %s", filename, result.error)

        return SaveChangelogResult(
            file_path=self.store.file_path(filename),
            slug=slug_from_filename(filename),
            committed=result.success,
            commit_hash=result.commit_hash,
            commit_error=result.error,
        )

    def read_entry(self, slug: str) -> ParsedChangelogEntry:
        if not is_plain_filename(slug):
            raise EntryNotFoundError(slug)
        for filename in (f"{slug}.mdx", f"{slug}.md"):
            content = self.store.read(filename)
            if content is not None:
                return parse_changelog_entry(content, filename)
        raise EntryNotFoundError(slug)

    def list_entries(self) -> list[ParsedChangelogEntry]:
        """All parseable entries, newest first. Bad files are logged and skipped."""
        entries = []
        for filename in self.store.list_files():
            content = self.store.read(filename)
            if content is None:
                continue
            try:
                entries.append(parse_changelog_entry(content, filename))
            except ChangelogError as e:
                logger.warning("Failed to parse %s: %s", filename, e)
        return sort_entries(entries)
