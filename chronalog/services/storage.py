"""Storage backends for changelog documents.

A store only moves document text in and out of a directory; it never
interprets it. ``LocalChangelogStore`` writes into a working tree and commits
with git, ``GitHubChangelogStore`` commits straight through the GitHub API.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from github import GithubException

from chronalog.config import Settings
from chronalog.exceptions import ConfigurationError, StorageError
from chronalog.services.git_service import CommitResult, GitService
from chronalog.services.github_service import GitHubService

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = (".md", ".mdx")


def is_changelog_file(name: str) -> bool:
    return name.lower().endswith(DOCUMENT_SUFFIXES)


def is_plain_filename(name: str) -> bool:
    """True for a bare filename with no path separators or parent references."""
    return bool(name) and "/" not in name and "\\" not in name and ".." not in name


class ChangelogStore(ABC):
    """Reads and writes changelog documents by filename."""

    def __init__(self, changelog_dir: str):
        self.changelog_dir = changelog_dir.strip("/")

    def file_path(self, filename: str) -> str:
        """Repository-relative path of a document."""
        if not is_plain_filename(filename):
            raise StorageError(f"Invalid document name: {filename!r}")
        return f"{self.changelog_dir}/{filename}" if self.changelog_dir else filename

    @abstractmethod
    def list_files(self) -> list[str]:
        """Filenames of all changelog documents."""
        ...

    @abstractmethod
    def read(self, filename: str) -> str | None:
        """Document text, or None when the file does not exist."""
        ...

    @abstractmethod
    def write(self, filename: str, content: str, message: str) -> CommitResult:
        """Persist a document and record it in version control."""
        ...

    def commit_history(self, limit: int = 50) -> list[dict]:
        return []

    def close(self) -> None:
        """Release backend resources."""


class LocalChangelogStore(ChangelogStore):
    def __init__(
        self,
        repo_path: str | Path,
        changelog_dir: str,
        auto_commit: bool = True,
        git: GitService | None = None,
    ):
        super().__init__(changelog_dir)
        self.repo_path = Path(repo_path)
        self.auto_commit = auto_commit
        self.git = git or GitService(self.repo_path)

    @property
    def directory(self) -> Path:
        return self.repo_path / self.changelog_dir

    def list_files(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            p.name for p in self.directory.iterdir() if p.is_file() and is_changelog_file(p.name)
        )

    def _path(self, filename: str) -> Path:
        """Absolute path of a document; refuses anything outside the directory."""
        root = self.directory.resolve()
        path = (root / filename).resolve()
        if not is_plain_filename(filename) or path.parent != root:
            raise StorageError(f"Refusing to access {filename!r} outside {self.changelog_dir or '.'}")
        return path

    def read(self, filename: str) -> str | None:
        path = self._path(filename)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, filename: str, content: str, message: str) -> CommitResult:
        path = self._path(filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write {self.file_path(filename)}: {e}") from e
        logger.info("Wrote %s", path)

        if not self.auto_commit:
            return CommitResult(False)
        return self.git.auto_commit(self.file_path(filename), message)

    def commit_history(self, limit: int = 50) -> list[dict]:
        return self.git.commit_history(limit)


class GitHubChangelogStore(ChangelogStore):
    def __init__(
        self,
        github: GitHubService,
        repo_full_name: str,
        changelog_dir: str,
        branch: str = "main",
        author_name: str | None = None,
        author_email: str | None = None,
    ):
        super().__init__(changelog_dir)
        self.github = github
        self.repo_full_name = repo_full_name
        self.branch = branch
        self.author_name = author_name
        self.author_email = author_email

    def list_files(self) -> list[str]:
        try:
            files = self.github.list_files(self.repo_full_name, self.changelog_dir, branch=self.branch)
        except GithubException as e:
            raise StorageError(f"Failed to list {self.changelog_dir} in {self.repo_full_name}: {e}") from e
        return [f["name"] for f in files if is_changelog_file(f["name"])]

    def read(self, filename: str) -> str | None:
        try:
            found = self.github.get_file_content(
                self.repo_full_name, self.file_path(filename), branch=self.branch
            )
        except GithubException as e:
            raise StorageError(f"Failed to read {self.file_path(filename)}: {e}") from e
        return found[0] if found else None

    def write(self, filename: str, content: str, message: str) -> CommitResult:
        path = self.file_path(filename)
        author = {"author_name": self.author_name, "author_email": self.author_email}
        try:
            existing = self.github.get_file_content(self.repo_full_name, path, branch=self.branch)
            if existing:
                commit_hash = self.github.update_file(
                    self.repo_full_name, path, content, message, existing[1],
                    branch=self.branch, **author,
                )
            else:
                commit_hash = self.github.create_file(
                    self.repo_full_name, path, content, message,
                    branch=self.branch, **author,
                )
        except GithubException as e:
            raise StorageError(f"Failed to commit {path} to {self.repo_full_name}: {e}") from e

        logger.info("Committed %s to %s as %s", path, self.repo_full_name, commit_hash[:7])
        return CommitResult(True, commit_hash=commit_hash)

    def commit_history(self, limit: int = 50) -> list[dict]:
        try:
            return self.github.get_commit_history(self.repo_full_name, branch=self.branch, limit=limit)
        except GithubException as e:
            logger.error("Error fetching commits via GitHub API: %s", e)
            return []

    def close(self) -> None:
        self.github.close()


def build_store(
    settings: Settings,
    access_token: str | None = None,
    author_name: str | None = None,
    author_email: str | None = None,
    directory: str | None = None,
) -> ChangelogStore:
    """Store for the configured backend.

    ``access_token`` overrides the configured token; ``directory`` overrides
    the changelog directory (the predefined-tags config lives elsewhere).
    """
    directory = settings.changelog_dir if directory is None else directory
    if settings.storage_backend == "github":
        repo = settings.repository()
        if not repo:
            raise ConfigurationError(
                "GitHub repository is required for the github backend. "
                "Set CHRONALOG_GITHUB_REPO or CHRONALOG_GITHUB_REMOTE_URL."
            )
        return GitHubChangelogStore(
            GitHubService(access_token or settings.github_token),
            repo,
            directory,
            branch=settings.github_branch,
            author_name=author_name,
            author_email=author_email,
        )

    if settings.storage_backend != "local":
        raise ConfigurationError(f"Unknown storage backend: {settings.storage_backend}")
    return LocalChangelogStore(settings.repo_path, directory, auto_commit=settings.auto_commit)
