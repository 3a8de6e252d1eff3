"""Cooperative cancellation through a caller-supplied asyncio.Event.

The translation loop and the evaluator accept an optional ``cancel_event``.
Every model call and step invocation is raced against that event: whichever
finishes first wins, and a set event always wins, even if the work finished
in the same tick.

Task cancellation (``task.cancel()``) is separate. It propagates as
``asyncio.CancelledError`` and is never converted.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable
from typing import TypeVar

from typeloom.exceptions import OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def check_cancelled(cancel_event: asyncio.Event | None, operation: str) -> None:
    """Raise OperationCancelledError if ``cancel_event`` is set."""
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError(operation)


async def await_or_cancel(
    awaitable: Awaitable[T],
    cancel_event: asyncio.Event | None,
    operation: str,
) -> T:
    """Await ``awaitable`` unless ``cancel_event`` is set first.

    Raises:
        OperationCancelledError: The event was set before, during, or right
            as the work completed. Unfinished work is cancelled and awaited.
    """
    if cancel_event is None:
        return await awaitable
    if cancel_event.is_set():
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise OperationCancelledError(operation)

    work = asyncio.ensure_future(awaitable)
    watcher = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        watcher.cancel()
        raise
    watcher.cancel()

    if cancel_event.is_set():
        if not work.done():
            work.cancel()
            await asyncio.wait({work})
        elif not work.cancelled():
            # Mark any exception as retrieved; cancellation takes precedence.
            work.exception()
        logger.debug("%s cancelled while awaiting", operation)
        raise OperationCancelledError(operation)
    return work.result()
