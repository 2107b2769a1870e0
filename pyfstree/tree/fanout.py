"""Fan-out runner shared by walk, copy and remove.

Each operation spawns one task per filesystem artifact and resolves a single
completion future when its root finishes. The first error from any task
fails the whole operation; tasks still in flight are cancelled and their
results discarded.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, Generic, TypeVar

from ..exceptions import TreeInvariantError
from .models import ROOT_PARENT, Tree

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FanOut(Generic[T]):
    """Tracks the tasks of one tree operation and its single outcome.

    Must be created inside a running event loop.
    """

    def __init__(self, operation: str):
        """Initialize the runner.

        Args:
            operation: Name used in log messages and invariant errors
        """
        self.operation = operation
        self._loop = asyncio.get_running_loop()
        self._done: asyncio.Future[T] = self._loop.create_future()
        self._tasks: set[asyncio.Task] = set()

    @property
    def finished(self) -> bool:
        return self._done.done()

    def spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        """Schedule a coroutine as part of this operation."""
        if self._done.done():
            # Operation already failed or finished; nothing more may start
            coro.close()
            return
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_finished)

    def finish(self, result: T) -> None:
        """Resolve the operation. Later calls are ignored."""
        if not self._done.done():
            self._done.set_result(result)

    def fail(self, exc: BaseException) -> None:
        """Fail the operation with the first error reported."""
        if not self._done.done():
            logger.debug(f"{self.operation} failed: {exc}")
            self._done.set_exception(exc)

    def _task_finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.fail(exc)
        elif not self._tasks and not self._done.done():
            self.fail(
                TreeInvariantError(
                    f"{self.operation}: all work finished but the root never completed"
                )
            )

    async def wait(self) -> T:
        """Wait for the operation outcome, cancelling leftovers on exit."""
        try:
            return await self._done
        finally:
            pending = [t for t in self._tasks if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                logger.debug(
                    f"{self.operation}: discarding {len(pending)} in-flight task(s)"
                )
                await asyncio.gather(*pending, return_exceptions=True)


def settle(run: FanOut, tree: Tree, parent_index: int) -> None:
    """Record that a child of ``parent_index`` finished.

    Decrements the parent's counter and keeps cascading while directories
    complete. Finishes ``run`` with the tree once the root completes.
    """
    index = parent_index
    while index != ROOT_PARENT:
        if not tree.release_child(index):
            return
        index = tree[index].parent_index
    run.finish(tree)
