"""Subprocess runner for the external git executable."""

import os
import signal
import logging
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from ..config import GitSettings
from ..core.context import Context, REASON_DEADLINE
from ..core.errors import (
    CommandCancelled,
    CommandTimeout,
    GitCommandError,
    GitNotFoundError,
)

logger = logging.getLogger('repoman')

HOST_KEY_STRICT = "yes"
HOST_KEY_ACCEPT_NEW = "accept-new"

# Seconds to wait for the pipe to close after a kill
KILL_GRACE = 1.0


@dataclass
class GitResult:
    """Completed command with its combined stdout/stderr."""
    args: List[str]
    returncode: int
    output: str

    def lines(self) -> List[str]:
        """Non-empty output lines."""
        return [line for line in self.output.strip().splitlines() if line.strip()]


class GitRunner:
    """Runs git non-interactively under a cancellation context."""

    def __init__(self, settings: Optional[GitSettings] = None):
        self.settings = settings or GitSettings()

    def ssh_options(self, accept_new_hosts: bool = False) -> str:
        """SSH options enforcing batch mode and the host-key policy."""
        policy = HOST_KEY_ACCEPT_NEW if accept_new_hosts else HOST_KEY_STRICT
        return (
            f"-o StrictHostKeyChecking={policy} "
            f"-o BatchMode=yes "
            f"-o ConnectTimeout={self.settings.connect_timeout}"
        )

    def build_env(
        self,
        accept_new_hosts: bool = False,
        base_env: Optional[Mapping[str, str]] = None
    ) -> Dict[str, str]:
        """Build the environment for a git call.

        Any GIT_SSH_COMMAND already set is extended with our options rather
        than replaced.

        Args:
            accept_new_hosts: Accept unknown host keys (first-time clone only)
            base_env: Environment to start from (default: os.environ)

        Returns:
            Environment dictionary
        """
        env = dict(os.environ if base_env is None else base_env)
        options = self.ssh_options(accept_new_hosts)
        existing = env.get('GIT_SSH_COMMAND')
        env['GIT_SSH_COMMAND'] = f"{existing} {options}" if existing else f"ssh {options}"
        env['GIT_TERMINAL_PROMPT'] = '0'
        return env

    def run(self, ctx: Optional[Context], *args: str, accept_new_hosts: bool = False) -> GitResult:
        """Run git with ``args`` and wait for it, honouring ``ctx``.

        The process is killed as soon as the context is cancelled or its
        deadline passes.

        Args:
            ctx: Cancellation context (None = background)
            *args: Arguments passed to git
            accept_new_hosts: Use accept-new instead of strict host-key checking

        Returns:
            GitResult for a zero exit status

        Raises:
            CommandCancelled: Context was cancelled
            CommandTimeout: Context deadline passed
            GitCommandError: Non-zero exit status
            GitNotFoundError: Executable could not be started
        """
        ctx = ctx or Context.background()
        cmd = [self.settings.executable, *args]

        if ctx.done:
            raise self._interrupted(ctx, cmd, "")

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=self.build_env(accept_new_hosts),
                text=True,
                errors='replace',
                start_new_session=True
            )
        except FileNotFoundError:
            raise GitNotFoundError(self.settings.executable, cmd)

        with proc:
            while True:
                wait = self.settings.poll_interval
                remaining = ctx.remaining()
                if remaining is not None:
                    wait = min(wait, remaining)
                try:
                    output, _ = proc.communicate(timeout=max(wait, 0.001))
                    break
                except subprocess.TimeoutExpired:
                    if ctx.done:
                        output = self._kill(proc)
                        logger.debug(f"Killed ({ctx.reason}): {' '.join(cmd)}")
                        raise self._interrupted(ctx, cmd, output)

        output = output or ""
        if proc.returncode != 0:
            raise GitCommandError(cmd, proc.returncode, output)
        return GitResult(args=cmd, returncode=proc.returncode, output=output)

    @staticmethod
    def _kill(proc: subprocess.Popen) -> str:
        """Kill git together with its helpers (ssh, remote-https) and reap it.

        Returns whatever output could be collected.
        """
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (AttributeError, ProcessLookupError, PermissionError):
            proc.kill()

        try:
            output, _ = proc.communicate(timeout=KILL_GRACE)
        except subprocess.TimeoutExpired:
            # A helper outside the group still holds the pipe
            if proc.stdout is not None:
                proc.stdout.close()
            proc.wait()
            output = ""
        return output or ""

    @staticmethod
    def _interrupted(ctx: Context, cmd: List[str], output: str) -> CommandCancelled:
        if ctx.reason == REASON_DEADLINE:
            return CommandTimeout(cmd, output)
        return CommandCancelled(cmd, output)
