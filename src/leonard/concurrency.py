from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


async def wait_until_stopped(coro: Awaitable[T], stop_event: asyncio.Event) -> T:
    """Await ``coro`` unless ``stop_event`` is set first.

    When the event wins, the task running ``coro`` is cancelled and this raises
    ``asyncio.CancelledError`` only after the task has finished its own cleanup,
    so an agent invocation has already terminated its child by then. If the
    event is already set, ``coro`` is never started.
    """
    if stop_event.is_set():
        if inspect.iscoroutine(coro):
            coro.close()
        raise asyncio.CancelledError

    task = asyncio.ensure_future(coro)
    stopper = asyncio.ensure_future(stop_event.wait())
    stopper.add_done_callback(lambda _: task.cancel())
    try:
        return await task
    finally:
        stopper.cancel()
