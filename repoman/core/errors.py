"""Exception hierarchy for repository operations."""

from typing import Optional, Sequence


class RepomanError(Exception):
    """Base class for all repoman errors."""


class RepositoryPathError(RepomanError):
    """Local path exists but cannot hold the repository (not a dir / not a repo)."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"path {path} exists but {reason}")
        self.path = path
        self.reason = reason


class EmptyRepositoryError(RepomanError):
    """The repository has no commits, so there is nothing to pull."""

    def __init__(self, path: str):
        super().__init__("repository is empty")
        self.path = path


class InvalidURLError(RepomanError, ValueError):
    """URL rejected before being handed to git."""

    def __init__(self, url: str):
        super().__init__(f"invalid git URL: {url}")
        self.url = url


class GitParseError(RepomanError):
    """Plumbing output did not have the expected shape."""


class SyncStateError(RepomanError):
    """Ahead/behind counts could not be determined."""


class NoUpstreamError(SyncStateError):
    """Current branch has no upstream tracking reference."""


class CommandFailed(RepomanError):
    """An external command did not complete successfully."""

    def __init__(self, message: str, args: Sequence[str], output: str = ""):
        super().__init__(message)
        self.command = list(args)
        self.output = output


class GitCommandError(CommandFailed):
    """Command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, output: str = ""):
        super().__init__(f"exit status {returncode}", args, output)
        self.returncode = returncode


class CommandCancelled(CommandFailed):
    """Command was interrupted because its context was cancelled."""

    def __init__(self, args: Sequence[str], output: str = "", reason: str = "cancelled"):
        super().__init__(f"command {reason}", args, output)
        self.reason = reason


class CommandTimeout(CommandCancelled):
    """Command was interrupted because its deadline passed."""

    def __init__(self, args: Sequence[str], output: str = ""):
        super().__init__(args, output, reason="deadline exceeded")


class GitNotFoundError(CommandFailed):
    """The git executable could not be started."""

    def __init__(self, executable: str, args: Sequence[str]):
        super().__init__(f"executable not found: {executable}", args)
        self.executable = executable


class GitOperationError(RepomanError):
    """A failed git operation, with an optional actionable hint attached.

    The underlying error is kept as ``__cause__`` and in ``error``.
    """

    def __init__(
        self,
        operation: str,
        error: Exception,
        output: str = "",
        hint: Optional[str] = None
    ):
        message = f"{operation} failed: {error}"
        if hint:
            message += f"\n  hint: {hint}"
        super().__init__(message)
        self.operation = operation
        self.error = error
        self.output = output
        self.hint = hint


class AuthenticationError(RepomanError):
    """No API key is available for the catalog service."""


class CatalogError(RepomanError):
    """The catalog service request failed."""


class UnauthorizedError(CatalogError):
    """The catalog service rejected the API key."""


class WorkspaceNotFoundError(RepomanError):
    """No workspace file was found in the directory or any of its parents."""
