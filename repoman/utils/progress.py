"""Progress tracking utilities."""

import sys
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, TextIO, Tuple

from ..core.types import RepoInfo

logger = logging.getLogger('repoman')


class ProgressObserver(ABC):
    """Receives one update per completed repository.

    The manager serializes calls, so implementations need no locking of
    their own. Completion order across repositories is arbitrary.
    """

    @abstractmethod
    def update(self, index: int, repo: RepoInfo, result: Any) -> None:
        """Record that the repository at ``index`` finished with ``result``."""

    def finish(self) -> None:
        """Called once after the batch has returned."""


class CallbackProgress(ProgressObserver):
    """Adapt a zero-argument callable, e.g. a progress bar's increment."""

    def __init__(self, callback: Callable[[], None]):
        self.callback = callback

    def update(self, index: int, repo: RepoInfo, result: Any) -> None:
        self.callback()


class ProgressTracker(ProgressObserver):
    """Count and log completed repositories."""

    def __init__(
        self,
        total: int,
        operation_name: str,
        is_success: Optional[Callable[[Any], bool]] = None,
        stream: Optional[TextIO] = None
    ):
        """Initialize progress tracker.

        Args:
            total: Total number of repositories to process
            operation_name: Name of the operation being performed
            is_success: Decides whether a result counts as success
                (default: result has no ``error``)
            stream: Where to draw a progress bar (None = log only)
        """
        self.total = total
        self.operation_name = operation_name
        self.is_success = is_success or (lambda result: getattr(result, 'error', None) is None)
        self.stream = stream
        self.completed = 0
        self.success_count = 0
        self.failed_count = 0
        self.events: List[Tuple[int, str]] = []

    def update(self, index: int, repo: RepoInfo, result: Any) -> None:
        self.completed += 1
        self.events.append((index, repo.name))

        if self.is_success(result):
            self.success_count += 1
            logger.info(f"✓ {repo.name}")
        else:
            self.failed_count += 1
            logger.error(f"✗ {repo.name}: {getattr(result, 'error', result)}")

        if self.stream is not None:
            self.display()

    def display(self) -> None:
        """Display current progress."""
        stream = self.stream or sys.stderr
        percentage = (self.completed / self.total * 100) if self.total > 0 else 0

        bar_width = 20
        filled = int(bar_width * self.completed / self.total) if self.total > 0 else 0
        bar = '█' * filled + '░' * (bar_width - filled)

        stream.write(
            f"\r[{bar}] {percentage:.0f}% ({self.completed}/{self.total}) "
            f"✓{self.success_count} ✗{self.failed_count}"
        )
        stream.flush()

    @property
    def not_attempted(self) -> int:
        """Repositories skipped because the batch was cancelled."""
        return self.total - self.completed

    def finish(self) -> None:
        """Finish progress tracking."""
        if self.stream is not None:
            self.stream.write("\n")
            self.stream.flush()

        logger.info(f"Completed {self.operation_name} operation")
        logger.info(f"Total: {self.total}, Success: {self.success_count}, "
                    f"Failed: {self.failed_count}, Not attempted: {self.not_attempted}")
