"""Shared fixtures: throwaway git repositories."""

import pytest

from tests.helpers import GIT_ENV, commit_file, run_git


@pytest.fixture(autouse=True)
def git_identity(monkeypatch):
    """Give every git call made by the code under test a committer identity."""
    for key, value in GIT_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv('GIT_SSH_COMMAND', raising=False)


@pytest.fixture
def source_repo(tmp_path):
    """A repository on branch main with one commit."""
    repo = tmp_path / "src"
    repo.mkdir()
    run_git(repo, "init", "-b", "main")
    commit_file(repo, "test.txt", "hello", "initial commit")
    return repo


@pytest.fixture
def empty_source_repo(tmp_path):
    """A repository with no commits."""
    repo = tmp_path / "empty-src"
    repo.mkdir()
    run_git(repo, "init", "-b", "main")
    return repo
