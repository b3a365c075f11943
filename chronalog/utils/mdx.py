"""Serialise and parse changelog entries as MDX files with frontmatter.

The frontmatter grammar is a deliberately small YAML subset: flat
``key: value`` scalars plus block sequences of strings. The writer and the
reader below must stay in step with each other, so no general YAML library
is involved on either side.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone

import pydantic

from chronalog.exceptions import FormatError, ValidationError
from chronalog.models.changelog import ParsedChangelogEntry, SaveChangelogRequest

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INT_RE = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?\d+\.\d+$")
_EXTENSION_RE = re.compile(r"\.mdx?$", re.IGNORECASE)
_SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")
_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n(.*))?\Z", re.DOTALL
)

# Named fields that are always strings; the parser does not coerce them.
STRING_KEYS = frozenset({"title", "date", "version", "commitHash", "updatedAt"})
LIST_KEYS = frozenset({"tags", "features", "bugfixes"})

# Keys owned by the serialiser or by storage; never taken from extras.
_RESERVED_KEYS = STRING_KEYS | LIST_KEYS | {"body", "slug", "filename"}


def normalise_tags(tags: list[str] | None) -> list[str]:
    """Trim, lowercase and de-duplicate tags, keeping first occurrences."""
    if not tags:
        return []

    seen: set[str] = set()
    result = []
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


def generate_slug(title: str, provided_slug: str | None = None) -> str:
    """Derive a URL-safe slug from a title, unless one was provided."""
    if provided_slug:
        return provided_slug
    return _SLUG_SEPARATOR_RE.sub("-", title.lower()).strip("-")


def slug_from_filename(filename: str) -> str:
    return _EXTENSION_RE.sub("", filename)


def format_timestamp(moment: datetime) -> str:
    """Render an ISO-8601 UTC timestamp with milliseconds and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def resolve_entry_date(date: str | None, now: datetime | None = None) -> str:
    """Effective ``date`` value for a saved entry.

    A bare ``YYYY-MM-DD`` keeps its calendar day but takes the current
    wall-clock time; any other value is passed through unchanged.
    """
    now = now or datetime.now(timezone.utc)
    if not date:
        return format_timestamp(now)

    if _DATE_ONLY_RE.match(date):
        try:
            day = datetime.strptime(date, "%Y-%m-%d")
        except ValueError:
            return date
        now_utc = now.astimezone(timezone.utc) if now.tzinfo else now
        combined = day.replace(
            hour=now_utc.hour,
            minute=now_utc.minute,
            second=now_utc.second,
            microsecond=now_utc.microsecond,
            tzinfo=timezone.utc,
        )
        return format_timestamp(combined)

    return date


def _clean_items(items: list[str] | None) -> list[str]:
    return [item.strip() for item in items or [] if item.strip()]


def _literal(value) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def _render_line(key: str, value) -> str:
    if isinstance(value, (list, tuple)):
        items = "\n".join(f"  - {json.dumps(str(v), ensure_ascii=False)}" for v in value)
        return f"{key}:\n{items}"
    if isinstance(value, str) and ":" in value:
        return f"{key}: {json.dumps(value, ensure_ascii=False)}"
    return f"{key}: {_literal(value)}"


def build_front_matter(entry: SaveChangelogRequest, now: datetime | None = None) -> dict:
    """Ordered frontmatter dict for a save request."""
    now = now or datetime.now(timezone.utc)

    fm: dict = {
        "title": entry.title,
        "date": resolve_entry_date(entry.date, now),
    }
    if entry.version:
        fm["version"] = entry.version
    if entry.commit_hash:
        fm["commitHash"] = entry.commit_hash
    # Only edits (which carry a slug) get an updatedAt stamp
    if entry.slug:
        fm["updatedAt"] = format_timestamp(now)

    tags = normalise_tags(entry.tags)
    if tags:
        fm["tags"] = tags
    features = _clean_items(entry.features)
    if features:
        fm["features"] = features
    bugfixes = _clean_items(entry.bugfixes)
    if bugfixes:
        fm["bugfixes"] = bugfixes

    for key, value in entry.extra_front_matter.items():
        if key in _RESERVED_KEYS:
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue
        fm[key] = value
    return fm


def serialise_changelog_entry(
    entry: SaveChangelogRequest, now: datetime | None = None
) -> str:
    """Serialise a save request into an MDX document."""
    fm = build_front_matter(entry, now)
    lines = "\n".join(_render_line(key, value) for key, value in fm.items())
    return f"---\n{lines}\n---\n\n{entry.body}"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _coerce(value: str):
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "null":
        return None
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    return value


def parse_front_matter_block(text: str) -> dict:
    """Parse the lines between the ``---`` delimiters into a dict."""
    result: dict = {}
    current_key: str | None = None
    items: list[str] = []
    in_array = False

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith("- "):
            if current_key is not None and in_array:
                items.append(_unquote(line[2:].strip()))
            continue

        key, sep, value = line.partition(":")
        if not sep:
            continue

        if current_key is not None and in_array and items:
            result[current_key] = items
        items = []
        in_array = False

        current_key = key.strip()
        value = value.strip()

        if value in ("", "[]"):
            in_array = True
            continue

        value = _unquote(value)
        result[current_key] = value if current_key in STRING_KEYS else _coerce(value)

    if current_key is not None and in_array and items:
        result[current_key] = items

    return result


def _conform(fm: dict) -> dict:
    """Fit stray shapes onto the named fields' types."""
    for key in STRING_KEYS & fm.keys():
        if isinstance(fm[key], list):
            fm[key] = ", ".join(fm[key])
    for key in LIST_KEYS & fm.keys():
        value = fm[key]
        if value is None:
            del fm[key]
        elif not isinstance(value, list):
            fm[key] = [_literal(value)]
    return fm


def parse_changelog_entry(content: str, filename: str) -> ParsedChangelogEntry:
    """Parse an MDX document into a changelog entry.

    Raises FormatError when the frontmatter block is missing and
    ValidationError when ``title`` or ``date`` is absent or a named field
    holds a value of the wrong type.
    """
    match = _FRONT_MATTER_RE.match(content)
    if not match:
        raise FormatError(filename)

    fm = _conform(parse_front_matter_block(match.group(1)))
    body = (match.group(2) or "").strip()

    for field in ("title", "date"):
        if not fm.get(field):
            raise ValidationError(field, filename)

    if "tags" in fm:
        fm["tags"] = normalise_tags(fm["tags"])

    fm.update(body=body, slug=slug_from_filename(filename), filename=filename)
    try:
        return ParsedChangelogEntry.model_validate(fm)
    except pydantic.ValidationError as e:
        loc = e.errors()[0]["loc"]
        field = str(loc[0]) if loc else "frontmatter"
        raise ValidationError(field, filename, problem="Invalid value for field") from e
