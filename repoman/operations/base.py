"""Base class for repository operations."""

from abc import ABC, abstractmethod
from typing import Any

from ..core.context import Context
from ..core.types import RepoInfo
from ..utils.git import GitOperations


class Operation(ABC):
    """Abstract base class for repository operations."""

    # Class attributes to be overridden by subclasses
    name: str = "base"
    description: str = "Base operation"

    def __init__(self, git: GitOperations, **kwargs):
        """Initialize operation.

        Args:
            git: Repository operations to run against
            **kwargs: Additional operation-specific parameters (ignored by base class)
        """
        self.git = git

    @abstractmethod
    def execute(self, repo: RepoInfo, ctx: Context) -> Any:
        """Execute the operation on a repository.

        Implementations report failures in the returned result rather than
        raising.

        Args:
            repo: Repository descriptor
            ctx: Cancellation context shared by the batch

        Returns:
            Result for this repository
        """

    @abstractmethod
    def error_result(self, repo: RepoInfo, error: Exception) -> Any:
        """Build the result recorded when ``execute`` raised unexpectedly."""

    def is_success(self, result: Any) -> bool:
        """Check if a result produced by this operation counts as success.

        Used for the batch summary; the default treats any result without an
        ``error`` as a success.
        """
        return getattr(result, 'error', None) is None
