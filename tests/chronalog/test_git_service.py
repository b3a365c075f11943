"""Tests for GitService with subprocess mocked out."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from chronalog.services.git_service import CommitResult, GitError, GitService


def _proc(stdout: str = "", returncode: int = 0, stderr: str = ""):
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def repo_dir(tmp_path):
    (tmp_path / ".git").mkdir()
    return tmp_path


@pytest.fixture
def which():
    with patch("chronalog.services.git_service.shutil.which", return_value="/usr/bin/git") as mock:
        yield mock


@pytest.fixture
def run(which):
    with patch("chronalog.services.git_service.subprocess.run") as mock:
        yield mock


class TestRun:
    def test_missing_git_binary(self, tmp_path):
        with patch("chronalog.services.git_service.shutil.which", return_value=None):
            with pytest.raises(GitError, match="not installed"):
                GitService(tmp_path)._run("status")

    def test_nonzero_exit_raises_with_stderr(self, repo_dir, run):
        run.return_value = _proc(returncode=128, stderr="fatal: bad things\n")
        with pytest.raises(GitError, match="fatal: bad things"):
            GitService(repo_dir)._run("status")

    def test_runs_in_repo_path(self, repo_dir, run):
        run.return_value = _proc(stdout="ok\n")
        assert GitService(repo_dir)._run("status") == "ok"
        args, kwargs = run.call_args
        assert args[0] == ["/usr/bin/git", "status"]
        assert kwargs["cwd"] == repo_dir


class TestAutoCommit:
    def test_not_a_repository(self, tmp_path, which):
        result = GitService(tmp_path).auto_commit("c/v1.mdx", "msg")
        assert result == CommitResult(False, error="Not a Git repository. Initialize Git first.")

    def test_git_not_installed(self, repo_dir):
        with patch("chronalog.services.git_service.shutil.which", return_value=None):
            result = GitService(repo_dir).auto_commit("c/v1.mdx", "msg")
        assert result.success is False
        assert "not installed" in result.error

    def test_success_returns_new_hash(self, repo_dir, run):
        run.side_effect = [
            _proc(),                 # add
            _proc(stdout="old\n"),   # rev-parse before
            _proc(),                 # commit
            _proc(stdout="new123456\n"),
        ]

        result = GitService(repo_dir).auto_commit("c/v1.mdx", "changelog: T")

        assert result == CommitResult(True, commit_hash="new123456")
        commands = [call.args[0][1:] for call in run.call_args_list]
        assert commands[0] == ["add", "--", "c/v1.mdx"]
        assert commands[2] == ["commit", "-m", "changelog: T"]

    def test_first_commit_has_no_previous_head(self, repo_dir, run):
        run.side_effect = [
            _proc(),
            _proc(returncode=128, stderr="unknown revision HEAD"),
            _proc(),
            _proc(stdout="first00\n"),
        ]
        assert GitService(repo_dir).auto_commit("c/v1.mdx", "m").commit_hash == "first00"

    def test_unchanged_head_is_a_failure(self, repo_dir, run):
        run.side_effect = [_proc(), _proc(stdout="same\n"), _proc(), _proc(stdout="same\n")]
        result = GitService(repo_dir).auto_commit("c/v1.mdx", "m")
        assert result.success is False
        assert result.error.startswith("Failed to commit changes")

    def test_commit_error_is_reported(self, repo_dir, run):
        run.side_effect = [
            _proc(),
            _proc(stdout="old\n"),
            _proc(returncode=1, stderr="nothing to commit"),
        ]
        result = GitService(repo_dir).auto_commit("c/v1.mdx", "m")
        assert result == CommitResult(False, error="Failed to commit changes: nothing to commit")


class TestQueries:
    def test_is_clean(self, repo_dir, run):
        run.return_value = _proc(stdout="")
        assert GitService(repo_dir).is_clean() is True
        run.return_value = _proc(stdout=" M file.mdx")
        assert GitService(repo_dir).is_clean() is False

    def test_commit_url(self, repo_dir, run):
        run.return_value = _proc(stdout="git@github.com:acme/site.git\n")
        assert GitService(repo_dir).commit_url("abc") == "https://github.com/acme/site/commit/abc"

    def test_commit_url_without_github_remote(self, repo_dir, run):
        run.return_value = _proc(stdout="https://gitlab.com/acme/site.git\n")
        assert GitService(repo_dir).commit_url("abc") is None

    def test_branch_outside_repository(self, tmp_path, run):
        assert GitService(tmp_path).branch() is None
        run.assert_not_called()

    def test_commit_history(self, repo_dir, run):
        run.return_value = _proc(stdout=(
            "a" * 40 + "|Ada|2024-01-02T00:00:00+00:00|changelog: Two | with pipe\n"
            + "b" * 40 + "|Bob|2024-01-01T00:00:00+00:00|changelog: One\n"
            + "garbage line"
        ))

        history = GitService(repo_dir).commit_history(limit=2)

        assert [c["author"] for c in history] == ["Ada", "Bob"]
        assert history[0]["message"] == "changelog: Two | with pipe"
        assert history[0]["short_hash"] == "aaaaaaa"
        assert run.call_args.args[0][1:4] == ["log", "-n", "2"]

    def test_commit_history_on_error(self, repo_dir, run):
        run.return_value = _proc(returncode=128, stderr="does not have any commits yet")
        assert GitService(repo_dir).commit_history() == []
