"""Sync operation: clone new repos and pull updates for existing ones."""

import logging
from typing import Optional

from .base import Operation
from ..core.context import Context
from ..core.types import RepoInfo, SyncOutcome
from ..utils.git import GitOperations

logger = logging.getLogger('repoman')


class SyncOperation(Operation):
    """Clone missing repositories and pull updates for existing ones."""

    name = "sync"
    description = "Clone new repos and pull updates for existing repos"

    def __init__(self, git: GitOperations, use_http: Optional[bool] = None, **kwargs):
        """Initialize sync operation.

        Args:
            git: Repository operations
            use_http: Force HTTPS (True) or SSH (False) for every repository;
                None keeps each descriptor's own preference
        """
        super().__init__(git, **kwargs)
        self.use_http = use_http

    def execute(self, repo: RepoInfo, ctx: Context) -> SyncOutcome:
        use_http = repo.use_http if self.use_http is None else self.use_http
        try:
            self.git.sync(repo.url, repo.path, use_http, ctx)
        except Exception as e:
            logger.debug(f"Sync failed for {repo.name}: {e}")
            return SyncOutcome(name=repo.name, error=e)
        return SyncOutcome(name=repo.name)

    def error_result(self, repo: RepoInfo, error: Exception) -> SyncOutcome:
        return SyncOutcome(name=repo.name, error=error)
