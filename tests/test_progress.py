"""Tests for progress observers."""

import io
import logging
from unittest.mock import Mock

from repoman.core.types import RepoInfo, SyncOutcome
from repoman.utils.progress import CallbackProgress, ProgressTracker


def repo(name):
    return RepoInfo(name=name, url=f"https://example.com/u/{name}", path=name)


def test_callback_progress_ignores_arguments():
    callback = Mock()
    observer = CallbackProgress(callback)
    observer.update(0, repo("a"), SyncOutcome(name="a"))
    observer.finish()
    callback.assert_called_once_with()


def test_tracker_counts_and_records_order(caplog):
    tracker = ProgressTracker(total=3, operation_name="sync")
    with caplog.at_level(logging.INFO, logger='repoman'):
        tracker.update(2, repo("c"), SyncOutcome(name="c"))
        tracker.update(0, repo("a"), SyncOutcome(name="a", error=RuntimeError("boom")))
        tracker.finish()

    assert tracker.events == [(2, "c"), (0, "a")]
    assert tracker.success_count == 1
    assert tracker.failed_count == 1
    assert tracker.not_attempted == 1
    assert "✗ a: boom" in caplog.text
    assert "Not attempted: 1" in caplog.text


def test_tracker_draws_bar_on_stream():
    stream = io.StringIO()
    tracker = ProgressTracker(total=2, operation_name="status", stream=stream)
    tracker.update(0, repo("a"), SyncOutcome(name="a"))
    tracker.finish()

    output = stream.getvalue()
    assert "50% (1/2)" in output
    assert output.endswith("\n")


def test_tracker_custom_success_rule():
    tracker = ProgressTracker(total=1, operation_name="x", is_success=lambda result: result == "fine")
    tracker.update(0, repo("a"), "fine")
    assert tracker.success_count == 1
