"""GitHub API wrapper using PyGithub for reading/writing changelog files."""

from __future__ import annotations

import base64
import logging

from github import Github, GithubException, InputGitAuthor

logger = logging.getLogger(__name__)


class GitHubService:
    """Wraps PyGithub to read/write changelog files in a GitHub repo."""

    def __init__(self, access_token: str):
        self.gh = Github(access_token) if access_token else Github()

    def close(self):
        self.gh.close()

    # ── Read operations ──

    def list_files(
        self, repo_full_name: str, directory: str, branch: str = "main"
    ) -> list[dict]:
        """List the files (not subdirectories) directly inside a directory."""
        repo = self.gh.get_repo(repo_full_name)
        path = directory.strip("/")
        try:
            contents = repo.get_contents(path, ref=branch)
        except GithubException as e:
            if e.status == 404:
                return []
            logger.warning("Failed to list files in %s/%s: %s", repo_full_name, path, e)
            raise

        if not isinstance(contents, list):
            contents = [contents]

        return [
            {"path": item.path, "name": item.name, "sha": item.sha}
            for item in contents
            if item.type == "file"
        ]

    def get_file_content(
        self, repo_full_name: str, file_path: str, branch: str = "main"
    ) -> tuple[str, str] | None:
        """Get file content and SHA, or None when the file does not exist."""
        repo = self.gh.get_repo(repo_full_name)
        try:
            file = repo.get_contents(file_path, ref=branch)
        except GithubException as e:
            if e.status == 404:
                return None
            raise
        if isinstance(file, list):
            raise ValueError(f"Expected file, got directory: {file_path}")
        content = base64.b64decode(file.content).decode("utf-8")
        return content, file.sha

    def get_commit_history(
        self, repo_full_name: str, branch: str = "main", limit: int = 50
    ) -> list[dict]:
        """Recent commits on a branch, newest first."""
        repo = self.gh.get_repo(repo_full_name)
        history = []
        for i, commit in enumerate(repo.get_commits(sha=branch)):
            if i >= limit:
                break
            author = commit.commit.author
            history.append({
                "hash": commit.sha,
                "short_hash": commit.sha[:7],
                "message": commit.commit.message.splitlines()[0] if commit.commit.message else "",
                "author": author.name if author else None,
                "date": author.date.isoformat() if author else None,
            })
        return history

    def is_collaborator(self, repo_full_name: str, login: str) -> bool:
        try:
            return self.gh.get_repo(repo_full_name).has_in_collaborators(login)
        except GithubException as e:
            logger.warning("Collaborator check failed for %s on %s: %s", login, repo_full_name, e)
            return False

    # ── Write operations ──

    @staticmethod
    def _author_kwargs(author_name: str | None, author_email: str | None) -> dict:
        if author_name and author_email:
            return {"author": InputGitAuthor(author_name, author_email)}
        return {}

    def create_file(
        self,
        repo_full_name: str,
        file_path: str,
        content: str,
        commit_message: str,
        branch: str = "main",
        author_name: str | None = None,
        author_email: str | None = None,
    ) -> str:
        """Create a new file in the repo. Returns the commit SHA."""
        repo = self.gh.get_repo(repo_full_name)
        result = repo.create_file(
            path=file_path,
            message=commit_message,
            content=content,
            branch=branch,
            **self._author_kwargs(author_name, author_email),
        )
        return result["commit"].sha

    def update_file(
        self,
        repo_full_name: str,
        file_path: str,
        content: str,
        commit_message: str,
        sha: str,
        branch: str = "main",
        author_name: str | None = None,
        author_email: str | None = None,
    ) -> str:
        """Update an existing file. Requires current file SHA. Returns commit SHA."""
        repo = self.gh.get_repo(repo_full_name)
        result = repo.update_file(
            path=file_path,
            message=commit_message,
            content=content,
            sha=sha,
            branch=branch,
            **self._author_kwargs(author_name, author_email),
        )
        return result["commit"].sha
