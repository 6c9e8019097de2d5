"""Attach actionable hints to failed git operations.

Classification only reads the error and the command output; the original
error is always kept and the hint is appended to it.
"""

from typing import List, Optional, Tuple

from .errors import GitCommandError, GitOperationError

HINT_SSH_AUTH = (
    "SSH authentication failed. Ensure your SSH key is added to ssh-agent (ssh-add) "
    "and your public key is registered with the remote server."
)
HINT_HTTP_AUTH = "HTTP authentication failed. Configure a Git credential helper or check your credentials."
HINT_UNREACHABLE = "Connection refused/timed out. The remote server may be down or unreachable."
HINT_HOST_KEY = (
    "SSH host key verification failed. This is a security issue - investigate before proceeding."
)
HINT_REMOTE = "Remote error - the repository may not exist or you may not have access."

SSH_EXIT_CODE = 255

# (output patterns, hint); first match wins
HINT_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("Permission denied, please try again", "Permission denied (publickey)", "publickey"), HINT_SSH_AUTH),
    (("Authentication failed", "401", "403", "Logon failed"), HINT_HTTP_AUTH),
    (("Connection refused", "Connection timed out"), HINT_UNREACHABLE),
    (("Host key verification failed",), HINT_HOST_KEY),
    (("fatal: bad object", "fatal: remote error"), HINT_REMOTE),
]


def classify(error: Exception, output: str = "") -> Optional[str]:
    """Pick the hint for a failed command.

    Args:
        error: The error raised for the command
        output: Combined stdout/stderr of the command

    Returns:
        Hint text, or None if nothing matched
    """
    output = output or ""
    for patterns, hint in HINT_RULES:
        if any(pattern in output for pattern in patterns):
            return hint
        # ssh exits with 255 for any connection-level failure
        if hint == HINT_SSH_AUTH and _is_ssh_exit(error):
            return hint
    return None


def _is_ssh_exit(error: Exception) -> bool:
    if isinstance(error, GitCommandError):
        return error.returncode == SSH_EXIT_CODE
    return f"exit status {SSH_EXIT_CODE}" in str(error)


def wrap_git_error(error: Exception, output: str, operation: str) -> GitOperationError:
    """Wrap ``error`` with the operation name and, if one matches, a hint.

    Use as ``raise wrap_git_error(e, e.output, "git pull") from e``.
    """
    return GitOperationError(operation, error, output, classify(error, output))
