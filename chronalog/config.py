from __future__ import annotations

import re

from pydantic_settings import BaseSettings, SettingsConfigDict

_GITHUB_REMOTE_RE = re.compile(r"(?:github\.com[/:]|git@github\.com:)([^/]+)/([^/]+?)(?:\.git)?/?$")


def parse_github_repo(url: str | None) -> str | None:
    """``owner/name`` from an SSH or HTTPS GitHub remote URL."""
    if not url:
        return None
    match = _GITHUB_REMOTE_RE.search(url.strip())
    if not match:
        return None
    return f"{match.group(1)}/{match.group(2)}"


class Settings(BaseSettings):
    # Changelog storage
    changelog_dir: str = "chronalog/changelog"
    config_dir: str = "chronalog"
    commit_message_format: str = "changelog: {title}"
    auto_commit: bool = True

    # "local" writes to repo_path and commits with git; "github" uses the API
    storage_backend: str = "local"
    repo_path: str = "."

    # GitHub repository
    github_repo: str = ""
    github_remote_url: str = ""
    github_branch: str = "main"
    github_token: str = ""

    # GitHub OAuth
    github_client_id: str = ""
    github_client_secret: str = ""

    # App
    app_secret_key: str = "change-me-in-production"
    app_base_url: str = "http://localhost:8000"
    frontend_url: str = "http://localhost:3000"
    home_url: str = "/"

    # Logging
    log_level: str = "info"

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Deployment mode: "container" (default) or "lambda"
    deployment_mode: str = "container"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def repository(self) -> str | None:
        """Configured ``owner/name``, falling back to the remote URL."""
        if self.github_repo:
            return self.github_repo.strip().strip("/")
        return parse_github_repo(self.github_remote_url)

    def commit_message(self, title: str) -> str:
        return self.commit_message_format.replace("{title}", title)

    model_config = SettingsConfigDict(
        env_prefix="CHRONALOG_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
