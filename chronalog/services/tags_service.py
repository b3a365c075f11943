"""Predefined tags and UI settings kept in ``config.json`` beside the changelog."""

from __future__ import annotations

import json
import logging

from chronalog.services.git_service import CommitResult
from chronalog.services.storage import ChangelogStore
from chronalog.utils.mdx import normalise_tags

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


class PredefinedTagsService:
    def __init__(self, store: ChangelogStore):
        self.store = store

    def read_config(self) -> dict:
        raw = self.store.read(CONFIG_FILENAME)
        if raw is None:
            return {}
        try:
            config = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable %s: %s", self.store.file_path(CONFIG_FILENAME), e)
            return {}
        return config if isinstance(config, dict) else {}

    def _write_config(self, config: dict, message: str) -> CommitResult:
        content = json.dumps(config, indent=2, ensure_ascii=False) + "\n"
        return self.store.write(CONFIG_FILENAME, content, message)

    def read_tags(self) -> list[str]:
        tags = self.read_config().get("tags", [])
        if not isinstance(tags, list):
            return []
        return normalise_tags([str(t) for t in tags])

    def save_tags(self, tags: list[str]) -> list[str]:
        """Replace the predefined tags; returns the normalised list stored."""
        config = self.read_config()
        config["tags"] = normalise_tags(tags)
        self._write_config(config, "chronalog: update predefined tags")
        return config["tags"]

    def read_home_url(self, default: str = "/") -> str:
        """Link target for the changelog page's "home" button."""
        home_url = self.read_config().get("homeUrl")
        if not isinstance(home_url, str) or not home_url.strip():
            return default
        return home_url.strip()

    def save_home_url(self, home_url: str) -> str:
        config = self.read_config()
        config["homeUrl"] = home_url.strip() or "/"
        self._write_config(config, "chronalog: update home URL")
        return config["homeUrl"]
