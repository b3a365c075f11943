"""Local git operations for committing changelog files."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from chronalog.config import parse_github_repo

logger = logging.getLogger(__name__)

# %H full hash, %an author name, %aI author date, %s subject
_LOG_FORMAT = "%H|%an|%aI|%s"


class GitError(Exception):
    """A git command failed."""


@dataclass
class CommitResult:
    success: bool
    commit_hash: str | None = None
    error: str | None = None


class GitService:
    """Runs git against a working tree."""

    def __init__(self, repo_path: str | Path = "."):
        self.repo_path = Path(repo_path)

    def _run(self, *args: str) -> str:
        git_bin = shutil.which("git")
        if not git_bin:
            raise GitError("Git is not installed or not available in PATH")
        proc = subprocess.run(
            [git_bin, *args],
            cwd=self.repo_path,
            capture_output=True,
            text=True,
        )
        if proc.returncode != 0:
            raise GitError(proc.stderr.strip() or f"git {args[0]} exited with {proc.returncode}")
        return proc.stdout.strip()

    def is_installed(self) -> bool:
        return shutil.which("git") is not None

    def is_repository(self) -> bool:
        return (self.repo_path / ".git").exists()

    def is_clean(self) -> bool:
        try:
            return self._run("status", "--porcelain") == ""
        except GitError:
            return False

    def stage(self, file_path: str) -> None:
        self._run("add", "--", file_path)

    def commit(self, message: str) -> str:
        """Commit staged changes and return the new HEAD hash."""
        try:
            before = self._run("rev-parse", "HEAD")
        except GitError:
            before = None  # first commit in the repository
        self._run("commit", "-m", message)
        commit_hash = self._run("rev-parse", "HEAD")
        if commit_hash == before:
            raise GitError("Commit did not create a new commit hash")
        return commit_hash

    def auto_commit(self, file_path: str, message: str) -> CommitResult:
        """Stage and commit one file. Failures are reported, not raised."""
        if not self.is_installed():
            return CommitResult(False, error="Git is not installed or not available in PATH")
        if not self.is_repository():
            return CommitResult(False, error="Not a Git repository. Initialize Git first.")

        try:
            self.stage(file_path)
            commit_hash = self.commit(message)
        except GitError as e:
            logger.warning("Auto-commit of %s failed: %s", file_path, e)
            return CommitResult(False, error=f"Failed to commit changes: {e}")

        logger.info("Committed %s as %s", file_path, commit_hash[:7])
        return CommitResult(True, commit_hash=commit_hash)

    def remote_url(self) -> str | None:
        if not self.is_repository():
            return None
        try:
            return self._run("config", "--get", "remote.origin.url") or None
        except GitError:
            return None

    def branch(self) -> str | None:
        if not self.is_repository():
            return None
        try:
            return self._run("branch", "--show-current") or None
        except GitError:
            return None

    def commit_url(self, commit_hash: str) -> str | None:
        """GitHub web URL for a commit, when origin points at GitHub."""
        repo = parse_github_repo(self.remote_url())
        if not repo:
            return None
        return f"https://github.com/{repo}/commit/{commit_hash}"

    def commit_history(self, limit: int = 50) -> list[dict]:
        if not self.is_repository():
            return []
        try:
            output = self._run("log", "-n", str(limit), f"--pretty=format:{_LOG_FORMAT}")
        except GitError as e:
            logger.error("Failed to get git commit history: %s", e)
            return []

        commits = []
        for line in output.splitlines():
            parts = line.split("|", 3)
            if len(parts) < 4:
                continue
            commit_hash, author, date, message = parts
            commits.append({
                "hash": commit_hash,
                "short_hash": commit_hash[:7],
                "author": author,
                "date": date,
                "message": message,
            })
        return commits
