"""Core package for repoman."""

from .errors import (
    RepomanError,
    RepositoryPathError,
    EmptyRepositoryError,
    InvalidURLError,
    GitParseError,
    SyncStateError,
    NoUpstreamError,
    CommandFailed,
    GitCommandError,
    CommandCancelled,
    CommandTimeout,
    GitNotFoundError,
    GitOperationError,
    AuthenticationError,
    CatalogError,
    UnauthorizedError,
    WorkspaceNotFoundError,
)
from .context import Context
from .types import (
    RepoInfo,
    RepoStatus,
    SyncOutcome,
    Course,
    Assignment,
    CatalogRepo,
)
from .classifier import classify, wrap_git_error
from .logger import setup_logging

__all__ = [
    # Errors
    'RepomanError',
    'RepositoryPathError',
    'EmptyRepositoryError',
    'InvalidURLError',
    'GitParseError',
    'SyncStateError',
    'NoUpstreamError',
    'CommandFailed',
    'GitCommandError',
    'CommandCancelled',
    'CommandTimeout',
    'GitNotFoundError',
    'GitOperationError',
    'AuthenticationError',
    'CatalogError',
    'UnauthorizedError',
    'WorkspaceNotFoundError',
    # Context
    'Context',
    # Types
    'RepoInfo',
    'RepoStatus',
    'SyncOutcome',
    'Course',
    'Assignment',
    'CatalogRepo',
    # Classification
    'classify',
    'wrap_git_error',
    # Logging
    'setup_logging',
]
