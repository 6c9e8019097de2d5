"""Git operations and utilities.

Every operation takes an optional cancellation ``Context``; each git call
runs under its own default deadline nested inside it.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from .runner import GitRunner
from .urls import normalize_url, validate_url
from ..config import GitSettings
from ..core.classifier import wrap_git_error
from ..core.context import Context
from ..core.errors import (
    CommandFailed,
    EmptyRepositoryError,
    GitParseError,
    NoUpstreamError,
    RepositoryPathError,
    SyncStateError,
)
from ..core.types import (
    RepoInfo,
    RepoStatus,
    STATUS_CLEAN,
    STATUS_EMPTY,
    STATUS_ERROR,
    STATUS_MISSING,
    STATE_NOT_APPLICABLE,
    STATE_STALE,
    STATE_SYNCED,
    STATE_UNKNOWN,
    UNKNOWN_BRANCH,
)

logger = logging.getLogger('repoman')

NO_UPSTREAM_MARKERS = ("no upstream configured", "does not point to a branch")


def repo_exists(repo_path: str) -> bool:
    """Check if anything exists at the local path."""
    return os.path.lexists(repo_path)


def is_repository(repo_path: str) -> bool:
    """Check if the path is a directory holding git metadata."""
    return os.path.isdir(repo_path) and os.path.exists(os.path.join(repo_path, '.git'))


class GitOperations:
    """Repository operations built on top of ``GitRunner``."""

    def __init__(self, settings: Optional[GitSettings] = None, runner: Optional[GitRunner] = None):
        """Initialize git operations.

        Args:
            settings: Git invocation settings (timeouts, executable)
            runner: Command runner (default: GitRunner built from settings)
        """
        self.settings = settings or GitSettings()
        self.runner = runner or GitRunner(self.settings)

    def _read(self, ctx: Optional[Context], *args: str):
        """Run a plumbing command under the short per-call deadline."""
        ctx = ctx or Context.background()
        return self.runner.run(ctx.with_timeout(self.settings.command_timeout), *args)

    def sync(self, url: str, repo_path: str, use_http: bool = False, ctx: Optional[Context] = None) -> None:
        """Ensure the repository is present at ``repo_path`` and up to date.

        Clones when nothing exists at the path, pulls when a repository does.

        Args:
            url: Remote URL in either SSH or HTTPS form
            repo_path: Local path of the working copy
            use_http: Use HTTPS instead of SSH
            ctx: Cancellation context

        Raises:
            RepositoryPathError: Path exists but is not a git repository
            EmptyRepositoryError: Remote has no commits to pull
            GitOperationError: Clone or pull failed
        """
        url = normalize_url(url, use_http)

        if repo_exists(repo_path):
            if not os.path.isdir(repo_path):
                raise RepositoryPathError(repo_path, "is not a directory")
            if not is_repository(repo_path):
                raise RepositoryPathError(repo_path, "is not a git repository")
            self.pull(repo_path, ctx)
            return

        self.clone(url, repo_path, use_http, ctx)

    def clone(self, url: str, repo_path: str, use_http: bool = False, ctx: Optional[Context] = None) -> None:
        """Clone a repository.

        A new host key is accepted here, and only here: this is the first
        contact with the remote for this working copy.

        Raises:
            InvalidURLError: URL could be misread by git
            GitOperationError: Clone failed
        """
        url = normalize_url(url, use_http)
        validate_url(url)

        ctx = ctx or Context.background()
        logger.debug(f"Cloning {url} to {repo_path}...")
        try:
            self.runner.run(
                ctx.with_timeout(self.settings.clone_timeout),
                "clone", url, repo_path,
                accept_new_hosts=True
            )
        except CommandFailed as e:
            raise wrap_git_error(e, e.output, "git clone") from e

    def pull(self, repo_path: str, ctx: Optional[Context] = None) -> None:
        """Pull latest changes for a repository.

        Raises:
            EmptyRepositoryError: Repository has no commits
            GitOperationError: Pull failed
        """
        ctx = ctx or Context.background()
        logger.debug(f"Pulling latest changes in {repo_path}...")
        try:
            self.runner.run(ctx.with_timeout(self.settings.pull_timeout), "-C", repo_path, "pull")
        except CommandFailed as e:
            try:
                empty = self.get_commit_count(repo_path, ctx) == 0
            except (CommandFailed, GitParseError):
                empty = False
            if empty:
                raise EmptyRepositoryError(repo_path) from e
            raise wrap_git_error(e, e.output, "git pull") from e

    def fetch(self, repo_path: str, ctx: Optional[Context] = None) -> None:
        """Fetch from the remote without touching the working tree.

        Raises:
            GitOperationError: Fetch failed
        """
        ctx = ctx or Context.background()
        try:
            self.runner.run(ctx.with_timeout(self.settings.pull_timeout), "-C", repo_path, "fetch")
        except CommandFailed as e:
            raise wrap_git_error(e, e.output, "git fetch") from e

    def get_branch(self, repo_path: str, ctx: Optional[Context] = None) -> str:
        """Get the current branch name.

        ``symbolic-ref`` works before the first commit; ``rev-parse`` covers a
        detached HEAD.

        Returns:
            Branch name, "HEAD" when detached, or "Unknown"
        """
        for args in (("symbolic-ref", "--short", "HEAD"), ("rev-parse", "--abbrev-ref", "HEAD")):
            try:
                result = self._read(ctx, "-C", repo_path, *args)
            except CommandFailed:
                continue
            branch = result.output.strip()
            if branch:
                return branch
        return UNKNOWN_BRANCH

    def get_commit_count(self, repo_path: str, ctx: Optional[Context] = None) -> int:
        """Count commits reachable from any ref.

        Raises:
            CommandFailed: git could not be run or failed
            GitParseError: Output was not a number
        """
        result = self._read(ctx, "-C", repo_path, "rev-list", "--all", "--count")
        text = result.output.strip()
        try:
            return int(text)
        except ValueError:
            raise GitParseError(f"failed to parse commit count: {text!r}")

    def get_status(self, repo_path: str, ctx: Optional[Context] = None) -> Tuple[str, str]:
        """Get the current branch and a summary of the working tree.

        Returns:
            (branch, summary) where summary is "Empty repo.", "Clean"
            or "<n> files modified"
        """
        branch = self.get_branch(repo_path, ctx)
        return branch, self.get_status_summary(repo_path, ctx)

    def get_status_summary(self, repo_path: str, ctx: Optional[Context] = None) -> str:
        """Summarize the working tree of a repository."""
        if self.get_commit_count(repo_path, ctx) == 0:
            return STATUS_EMPTY

        lines = self._read(ctx, "-C", repo_path, "status", "--short").lines()
        if not lines:
            return STATUS_CLEAN
        return f"{len(lines)} files modified"

    def get_sync_state(self, repo_path: str, ctx: Optional[Context] = None) -> str:
        """Compare HEAD with its upstream.

        Returns:
            "Synced", "Ahead (+a)", "Behind (-b)", "Diverged (+a, -b)",
            or "-" for a repository without commits

        Raises:
            NoUpstreamError: Branch has no upstream configured
            SyncStateError: Counts could not be obtained or parsed
        """
        if self.get_commit_count(repo_path, ctx) == 0:
            return STATE_NOT_APPLICABLE

        try:
            result = self._read(ctx, "-C", repo_path, "rev-list", "--left-right", "--count", "HEAD...@{u}")
        except CommandFailed as e:
            if any(marker in e.output for marker in NO_UPSTREAM_MARKERS):
                raise NoUpstreamError(f"no upstream configured for {repo_path}") from e
            raise SyncStateError(f"failed to get sync state: {e}") from e

        parts = result.output.split()
        if len(parts) != 2:
            raise SyncStateError(f"unexpected output from rev-list: {result.output!r}")
        try:
            ahead, behind = int(parts[0]), int(parts[1])
        except ValueError:
            raise SyncStateError(f"unexpected output from rev-list: {result.output!r}")

        if ahead == 0 and behind == 0:
            return STATE_SYNCED
        if ahead and behind:
            return f"Diverged (+{ahead}, -{behind})"
        if ahead:
            return f"Ahead (+{ahead})"
        return f"Behind (-{behind})"

    def get_last_commit_time(self, repo_path: str, ctx: Optional[Context] = None) -> Optional[datetime]:
        """Time of the most recent commit on any branch.

        Returns:
            UTC datetime, or None when the repository has no commits
        """
        try:
            result = self._read(ctx, "-C", repo_path, "log", "-1", "--format=%at", "--all")
        except CommandFailed:
            try:
                empty = self.get_commit_count(repo_path, ctx) == 0
            except (CommandFailed, GitParseError):
                empty = False
            if empty:
                return None
            raise

        text = result.output.strip()
        if not text:
            return None
        try:
            return datetime.fromtimestamp(int(text), tz=timezone.utc)
        except ValueError:
            raise GitParseError(f"failed to parse commit time: {text!r}")

    def collect_status(self, repo: RepoInfo, fetch: bool = True, ctx: Optional[Context] = None) -> RepoStatus:
        """Collect the full status record for one repository.

        Failures are recorded on the returned status, never raised.

        Args:
            repo: Repository descriptor
            fetch: Fetch from the remote first so the sync state is current
            ctx: Cancellation context

        Returns:
            RepoStatus for the repository
        """
        if not repo_exists(repo.path):
            return RepoStatus(name=repo.name, local_summary=STATUS_MISSING)

        fetch_error = None
        if fetch:
            try:
                self.fetch(repo.path, ctx)
            except Exception as e:
                logger.debug(f"Fetch failed for {repo.name}: {e}")
                fetch_error = e

        error = None
        branch = self.get_branch(repo.path, ctx)
        try:
            summary = self.get_status_summary(repo.path, ctx)
        except Exception as e:
            summary = STATUS_ERROR
            error = e

        try:
            sync_state = self.get_sync_state(repo.path, ctx)
        except Exception as e:
            sync_state = STATE_UNKNOWN
            error = error or e
        else:
            if fetch_error is not None:
                sync_state += f" ({STATE_STALE})"

        last_commit = None
        try:
            last_commit = self.get_last_commit_time(repo.path, ctx)
        except Exception as e:
            error = error or e

        return RepoStatus(
            name=repo.name,
            branch=branch,
            local_summary=summary,
            sync_state=sync_state,
            last_commit_time=last_commit,
            error=error,
            fetch_error=fetch_error
        )
