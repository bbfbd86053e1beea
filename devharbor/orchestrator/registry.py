"""In-process background task registry.

Holds handles to detached background tasks (the asynchronous release path)
so they are not garbage-collected mid-flight.  Ephemeral -- empty on process
restart.  There is no result channel: the only durable trace of a task is
whatever it wrote to the control plane.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from loguru import logger


class ShuttingDownError(RuntimeError):
    """Raised when attempting to spawn a task during shutdown."""


class TaskRegistry:
    """Bounded spawner for fire-and-forget background tasks.

    At most ``max_concurrency`` task bodies run at once; further tasks are
    created immediately but wait on a semaphore before starting.  Exceptions
    escaping a task body are logged and dropped.

    The registry also provides a drain mechanism for graceful shutdown:
    ``wait_until_drained`` blocks until every spawned task has finished.
    """

    def __init__(self, max_concurrency: int = 16) -> None:
        self._tasks: set[asyncio.Task[None]] = set()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._drain_event = asyncio.Event()
        self._drain_event.set()  # Starts "drained" (no tasks).
        self._shutting_down = False

    # -- Mutation --------------------------------------------------------------

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[None]:
        """Schedule *coro* in the background.  Raises ``ShuttingDownError`` if shutting down."""
        if self._shutting_down:
            coro.close()
            raise ShuttingDownError
        task = asyncio.create_task(self._run(coro, name), name=name)
        self._tasks.add(task)
        self._drain_event.clear()
        task.add_done_callback(self._discard)
        logger.debug("Registry: spawned task {} ({} active)", name, len(self._tasks))
        return task

    async def _run(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        async with self._semaphore:
            try:
                await coro
            except asyncio.CancelledError:
                logger.info("Registry: task {} cancelled", name)
                raise
            except Exception:
                logger.exception("Registry: task {} failed", name)

    def _discard(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not self._tasks:
            self._drain_event.set()

    # -- Query -----------------------------------------------------------------

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    # -- Lifecycle -------------------------------------------------------------

    def begin_shutdown(self) -> None:
        """Mark the registry as shutting down.  New tasks are refused."""
        self._shutting_down = True
        logger.info("Registry: shutdown initiated, refusing new tasks")
        if not self._tasks:
            self._drain_event.set()

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    def cancel_all(self) -> int:
        """Cancel every task still running.  Last resort during forced shutdown."""
        count = 0
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
                count += 1
        if count:
            logger.warning("Registry: cancelled {} background tasks", count)
        return count

    async def wait_until_drained(self, timeout: float | None = None) -> bool:
        """Wait until all spawned tasks have finished.

        Returns ``True`` if none remain, ``False`` if *timeout* expired with
        tasks still active.
        """
        if not self._tasks:
            return True
        try:
            await asyncio.wait_for(self._drain_event.wait(), timeout=timeout)
        except TimeoutError:
            logger.warning(
                "Registry: drain timed out after {}s with {} tasks still active",
                timeout,
                len(self._tasks),
            )
            return False
        else:
            return True
