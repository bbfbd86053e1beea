"""Bounded polling -- the only suspension points in the orchestrators."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

import anyio
from loguru import logger

from devharbor.orchestrator.errors import OrchestratorError

T = TypeVar("T")


async def poll_until(
    probe: Callable[[], Awaitable[T]],
    predicate: Callable[[T], bool],
    *,
    interval: float,
    timeout: float,
    label: str,
) -> T | None:
    """Call *probe* every *interval* seconds until *predicate* accepts its result.

    Returns the accepted value, or ``None`` once *timeout* seconds of wall
    clock have elapsed.  Control-plane errors raised by *probe* (a flaky read,
    an object not yet visible after create) are logged and the loop carries
    on -- a single bad read never fails the wait.
    """
    deadline = anyio.current_time() + timeout
    attempts = 0
    while True:
        attempts += 1
        try:
            value = await probe()
        except OrchestratorError as exc:
            logger.debug("Poll {}: attempt {} failed: {}", label, attempts, exc)
        else:
            if predicate(value):
                return value

        remaining = deadline - anyio.current_time()
        if remaining <= 0:
            logger.debug("Poll {}: gave up after {} attempts", label, attempts)
            return None
        await anyio.sleep(min(interval, remaining))
