"""Deadline and cancellation-signal handling for one awaited call."""

import asyncio
from typing import Awaitable, Optional, TypeVar

from relaybot.domain.errors import Canceled

T = TypeVar("T")


async def _reap(task: asyncio.Future):
    """Wait for a cancelled task to unwind and mark its outcome as retrieved."""
    await asyncio.wait({task})
    if not task.cancelled():
        task.exception()


async def run_cancellable(
    aw: Awaitable[T],
    timeout: Optional[float] = None,
    cancel: Optional[asyncio.Event] = None,
) -> T:
    """Await `aw` until it finishes, `timeout` elapses, or `cancel` is set.

    On deadline or signal the inner task is cancelled and awaited before
    Canceled is raised, so no retry loop is left running. If the task
    running this coroutine is itself cancelled, the inner task is cancelled
    too and CancelledError propagates.
    """
    task = asyncio.ensure_future(aw)
    waiters = {task}
    signal_waiter = None
    if cancel is not None:
        signal_waiter = asyncio.ensure_future(cancel.wait())
        waiters.add(signal_waiter)

    try:
        done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        if signal_waiter is not None:
            signal_waiter.cancel()

    if task in done:
        if task.cancelled():
            raise Canceled("call was cancelled")
        return task.result()

    task.cancel()
    await _reap(task)
    if signal_waiter is not None and signal_waiter in done:
        raise Canceled("cancellation requested")
    raise Canceled(f"deadline of {timeout}s expired")
