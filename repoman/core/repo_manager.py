"""Repository manager for orchestrating operations."""

import queue
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Sequence, TypeVar, Union

from .context import Context
from .types import RepoInfo, RepoStatus, SyncOutcome
from ..config import Config
from ..operations.base import Operation
from ..operations.status import StatusOperation
from ..operations.sync import SyncOperation
from ..utils.git import GitOperations
from ..utils.progress import CallbackProgress, ProgressObserver

logger = logging.getLogger('repoman')

DEFAULT_CONCURRENCY = 5

T = TypeVar('T')
R = TypeVar('R')

Progress = Union[ProgressObserver, Callable[[], None], None]


def _as_observer(progress: Progress) -> Optional[ProgressObserver]:
    if progress is None or isinstance(progress, ProgressObserver):
        return progress
    return CallbackProgress(progress)


def concurrent_map(
    ctx: Context,
    concurrency: int,
    items: Sequence[T],
    worker: Callable[[Context, T], R],
    progress: Optional[Callable[[int, T, R], None]] = None
) -> List[Optional[R]]:
    """Apply ``worker`` to every item on a bounded pool of threads.

    Results are stored at their item's index, whatever order they complete
    in. Once ``ctx`` is done, workers stop taking new items; items already
    started run to completion, and slots never claimed stay ``None``.

    Args:
        ctx: Cancellation context shared by all workers
        concurrency: Maximum number of items processed at once
        items: Items to process
        worker: Called as ``worker(ctx, item)``
        progress: Called as ``progress(index, item, result)`` once per
            completed item, never concurrently with itself; exceptions it
            raises are logged and do not stop the batch

    Returns:
        List of results, index-aligned with ``items``
    """
    results: List[Optional[R]] = [None] * len(items)
    if not items:
        return results

    tasks: 'queue.Queue[tuple]' = queue.Queue()
    for index, item in enumerate(items):
        tasks.put((index, item))

    lock = threading.Lock()
    num_workers = max(1, min(concurrency, len(items)))

    def drain() -> None:
        while not ctx.done:
            try:
                index, item = tasks.get_nowait()
            except queue.Empty:
                return
            result = worker(ctx, item)
            results[index] = result
            if progress is not None:
                with lock:
                    try:
                        progress(index, item, result)
                    except Exception:
                        logger.exception(f"Progress callback failed for item {index}")

    with ThreadPoolExecutor(max_workers=num_workers, thread_name_prefix='repoman') as executor:
        futures = [executor.submit(drain) for _ in range(num_workers)]
        for future in futures:
            future.result()

    return results


class RepoManager:
    """Manager for orchestrating repository operations."""

    def __init__(self, config: Config, git: Optional[GitOperations] = None):
        """Initialize repository manager.

        Args:
            config: Application configuration
            git: Repository operations (default: built from ``config.git``)
        """
        self.config = config
        self.git = git or GitOperations(config.git)

        if config.sequential:
            self.max_workers = 1
        elif config.max_workers is None or config.max_workers <= 0:
            self.max_workers = DEFAULT_CONCURRENCY
        else:
            self.max_workers = config.max_workers

    def execute_operation(
        self,
        operation: Operation,
        repos: Sequence[RepoInfo],
        ctx: Optional[Context] = None,
        progress: Progress = None
    ) -> List[Any]:
        """Execute an operation on a list of repositories.

        Args:
            operation: Operation instance
            repos: Repository descriptors
            ctx: Cancellation context for the whole batch
            progress: Observer or zero-argument callable notified per repository

        Returns:
            One result per repository, index-aligned with ``repos``; None for
            repositories not attempted because the batch was cancelled
        """
        ctx = ctx or Context.background()
        observer = _as_observer(progress)

        logger.info(f"Executing operation: {operation.name} ({operation.description})")
        logger.info(f"Total repositories: {len(repos)}")
        logger.info(f"Using {min(self.max_workers, len(repos))} workers")

        def notify(index: int, repo: RepoInfo, result: Any) -> None:
            if observer is not None:
                observer.update(index, repo, result)

        results = concurrent_map(
            ctx,
            self.max_workers,
            list(repos),
            lambda worker_ctx, repo: self._process_repo(operation, repo, worker_ctx),
            notify
        )

        attempted = [result for result in results if result is not None]
        failed = sum(1 for result in attempted if not operation.is_success(result))
        logger.info(f"Finished {operation.name}: {len(attempted) - failed} succeeded, {failed} failed")

        if ctx.done:
            skipped = len(results) - len(attempted)
            logger.warning(f"Batch {ctx.reason}; {skipped} repositories not attempted")

        if observer is not None:
            observer.finish()

        return results

    def _process_repo(self, operation: Operation, repo: RepoInfo, ctx: Context) -> Any:
        """Process a single repository.

        Args:
            operation: Operation instance
            repo: Repository descriptor
            ctx: Cancellation context

        Returns:
            Operation result
        """
        logger.debug(f"Repository: {repo.name} ({repo.path})")
        try:
            return operation.execute(repo, ctx)
        except Exception as e:
            logger.error(f"Unexpected error processing {repo.name}: {e}")
            return operation.error_result(repo, e)

    def sync_all(
        self,
        repos: Sequence[RepoInfo],
        ctx: Optional[Context] = None,
        progress: Progress = None,
        use_http: Optional[bool] = None
    ) -> List[Optional[SyncOutcome]]:
        """Clone or pull every repository.

        Args:
            repos: Repository descriptors
            ctx: Cancellation context for the whole batch
            progress: Observer or zero-argument callable notified per repository
            use_http: Override every descriptor's transport preference

        Returns:
            SyncOutcome per repository (None if not attempted)
        """
        operation = SyncOperation(self.git, use_http=use_http)
        return self.execute_operation(operation, repos, ctx, progress)

    def status_all(
        self,
        repos: Sequence[RepoInfo],
        fetch: bool = True,
        ctx: Optional[Context] = None,
        progress: Progress = None
    ) -> List[Optional[RepoStatus]]:
        """Collect the status of every repository.

        Args:
            repos: Repository descriptors
            fetch: Fetch from the remote before computing the sync state
            ctx: Cancellation context for the whole batch
            progress: Observer or zero-argument callable notified per repository

        Returns:
            RepoStatus per repository (None if not attempted)
        """
        operation = StatusOperation(self.git, fetch=fetch)
        return self.execute_operation(operation, repos, ctx, progress)
