"""Semantic version helpers for changelog entries."""

from __future__ import annotations

import re
from typing import Literal

BumpKind = Literal["major", "minor", "patch"]

_LEADING_V_RE = re.compile(r"^v", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*[+-]?\d+")
_SEMVER_RE = re.compile(r"\d+\.\d+\.\d+")


def _strip_v(version: str) -> str:
    return _LEADING_V_RE.sub("", version, count=1)


def _component(part: str) -> int:
    """Leading integer of a version component; 0 when there is none."""
    match = _LEADING_INT_RE.match(part)
    return int(match.group()) if match else 0


def parse_version(version: str) -> tuple[int, int, int]:
    parts = _strip_v(version).split(".")
    parts += ["0"] * (3 - len(parts))
    major, minor, patch = (_component(p) for p in parts[:3])
    return major, minor, patch


def increment_version(version: str, kind: BumpKind = "patch") -> str:
    """Bump a semantic version. Malformed components count as 0."""
    major, minor, patch = parse_version(version or "")

    if kind == "major":
        major += 1
        minor = 0
        patch = 0
    elif kind == "minor":
        minor += 1
        patch = 0
    elif kind == "patch":
        patch += 1

    return f"{major}.{minor}.{patch}"


def is_valid_version(version: str) -> bool:
    return bool(_SEMVER_RE.fullmatch(_strip_v(version)))


def extract_version(version: str | None) -> str | None:
    """Version without its leading ``v``, or None when unset."""
    if not version:
        return None
    return _strip_v(version)


def version_filename(version: str) -> str:
    """Storage filename for a new entry, e.g. ``1.2.3`` -> ``v1-2-3.mdx``."""
    clean = _strip_v(version.strip())
    return f"v{clean.replace('.', '-')}.mdx"
