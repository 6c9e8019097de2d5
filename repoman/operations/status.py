"""Status operation: report repository synchronization status."""

from .base import Operation
from ..core.context import Context
from ..core.types import RepoInfo, RepoStatus, STATUS_ERROR, STATE_UNKNOWN
from ..utils.git import GitOperations


class StatusOperation(Operation):
    """Report branch, working tree and upstream divergence for each repository."""

    name = "status"
    description = "Report repository synchronization status"

    def __init__(self, git: GitOperations, fetch: bool = True, **kwargs):
        """Initialize status operation.

        Args:
            git: Repository operations
            fetch: Whether to fetch from remote before checking status
        """
        super().__init__(git, **kwargs)
        self.fetch = fetch

    def execute(self, repo: RepoInfo, ctx: Context) -> RepoStatus:
        return self.git.collect_status(repo, fetch=self.fetch, ctx=ctx)

    def error_result(self, repo: RepoInfo, error: Exception) -> RepoStatus:
        return RepoStatus(
            name=repo.name,
            local_summary=STATUS_ERROR,
            sync_state=STATE_UNKNOWN,
            error=error
        )
