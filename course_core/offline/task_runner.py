# =============================================================================
# course_core/offline/task_runner.py
# One cancellable task per user action
# =============================================================================
"""
SyncTaskRunner - Runs coordinator operations off the UI thread.

Each submitted operation gets its own CancelToken. Cancelling a task that
has not started prevents it from running; cancelling a running task makes
the coordinator discard the outcome at its next checkpoint (after the
remote call, before any local write).

Usage:
    runner = SyncTaskRunner()
    task = runner.submit(coordinator.read_all)
    ...
    runner.cancel_all()   # user navigated away
"""

from __future__ import annotations
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional
import logging

from course_core.errors import OperationCancelled

logger = logging.getLogger(__name__)


class CancelToken:
    """Cooperative cancellation flag checked at suspension points."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled()


class SyncTask:
    """Handle on a submitted operation."""

    def __init__(self, future: Future, token: CancelToken, name: str):
        self.future = future
        self.token = token
        self.name = name

    def cancel(self) -> bool:
        """
        Request cancellation.

        Returns:
            True if the task was stopped before it started
        """
        self.token.cancel()
        return self.future.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> Any:
        return self.future.result(timeout=timeout)


class SyncTaskRunner:
    """Thread-pool executor handing out cancellable tasks."""

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="SyncTask")
        self._tasks: List[SyncTask] = []
        self._lock = threading.Lock()

    def submit(self, fn: Callable[..., Any], *args, **kwargs) -> SyncTask:
        """
        Run `fn(*args, cancel_token=token, **kwargs)` on the pool.

        Returns:
            SyncTask handle
        """
        token = CancelToken()
        name = getattr(fn, "__qualname__", repr(fn))
        future = self._executor.submit(fn, *args, cancel_token=token, **kwargs)
        task = SyncTask(future, token, name)

        with self._lock:
            self._tasks = [t for t in self._tasks if not t.done()]
            self._tasks.append(task)

        future.add_done_callback(lambda f: self._log_outcome(task, f))
        return task

    def _log_outcome(self, task: SyncTask, future: Future) -> None:
        if future.cancelled():
            logger.debug(f"Task {task.name} cancelled before start")
        elif future.exception() is not None:
            logger.error(f"Task {task.name} raised: {future.exception()}")

    @property
    def pending(self) -> List[SyncTask]:
        with self._lock:
            return [t for t in self._tasks if not t.done()]

    def cancel_all(self) -> int:
        """
        Cancel every unfinished task (navigation away).

        Returns:
            Number of tasks that were asked to cancel
        """
        tasks = self.pending
        for task in tasks:
            task.cancel()
        if tasks:
            logger.info(f"Cancelled {len(tasks)} pending task(s)")
        return len(tasks)

    def shutdown(self, wait: bool = True) -> None:
        self.cancel_all()
        self._executor.shutdown(wait=wait)
