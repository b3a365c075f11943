from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field

# Passthrough frontmatter values the line parser can produce.
FrontMatterValue = Union[str, int, float, bool, None, list[str]]


class ChangelogEntry(BaseModel):
    """Frontmatter schema for a changelog entry.

    Unknown keys are kept as passthrough metadata.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str
    date: str
    version: str | None = None
    tags: list[str] | None = None
    features: list[str] | None = None
    bugfixes: list[str] | None = None
    body: str | None = None
    commit_hash: str | None = Field(default=None, alias="commitHash")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    def to_front_matter(self) -> dict:
        """Wire-shaped dict (camelCase keys, unset fields dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SaveChangelogRequest(BaseModel):
    """Request body for saving a changelog entry."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str
    body: str
    date: str | None = None
    version: str | None = None
    tags: list[str] = []
    features: list[str] = []
    bugfixes: list[str] = []
    slug: str | None = None
    commit_hash: str | None = Field(default=None, alias="commitHash")

    @property
    def extra_front_matter(self) -> dict:
        return dict(self.model_extra or {})


class ParsedChangelogEntry(ChangelogEntry):
    """Changelog entry loaded from storage. Built only by the parser.

    Only the wire names fill the typed fields; a snake_case key such as
    ``commit_hash`` in a document is kept as passthrough metadata.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=False, frozen=True)

    body: str
    slug: str
    filename: str


class SaveChangelogResult(BaseModel):
    """Outcome of persisting an entry."""

    file_path: str
    slug: str
    committed: bool = False
    commit_hash: str | None = None
    commit_error: str | None = None


class NextVersionResponse(BaseModel):
    current: str | None = None
    next: str
    bump: str


class PredefinedTags(BaseModel):
    tags: list[str] = []


class HomeUrl(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    home_url: str = Field(alias="homeUrl")
