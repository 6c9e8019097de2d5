"""Helpers for driving real git repositories in tests."""

import os
import shutil
import subprocess

import pytest

GIT_ENV = {
    'GIT_AUTHOR_NAME': 'Test User',
    'GIT_AUTHOR_EMAIL': 'test@example.com',
    'GIT_COMMITTER_NAME': 'Test User',
    'GIT_COMMITTER_EMAIL': 'test@example.com',
    'GIT_CONFIG_NOSYSTEM': '1',
}

requires_git = pytest.mark.skipif(shutil.which('git') is None, reason="git executable not available")


def run_git(cwd, *args):
    """Run git in ``cwd`` and return stdout, failing the test on error."""
    env = dict(os.environ, **GIT_ENV)
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        env=env,
        capture_output=True,
        text=True
    )
    assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stdout}{result.stderr}"
    return result.stdout


def commit_file(repo, filename, content, message=None):
    (repo / filename).write_text(content)
    run_git(repo, "add", filename)
    run_git(repo, "commit", "-m", message or f"add {filename}")
