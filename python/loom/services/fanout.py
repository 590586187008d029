"""Concurrent fan-out with a join barrier.

join_all runs a fixed set of awaitables concurrently and waits for all of
them. The first failure cancels the remaining tasks and is re-raised;
cancelling the caller cancels every task still in flight.
"""

import asyncio
from collections.abc import Awaitable
from typing import Any


async def join_all(*aws: Awaitable[Any]) -> list[Any]:
    """Await every awaitable concurrently and return results in argument order.

    Raises:
        Exception: The first failure, in argument order among the tasks that
            had failed when the barrier released. Unfinished siblings are
            cancelled and awaited before it propagates.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel_all(tasks)
        raise

    if pending:
        await _cancel_all(pending)

    for task in tasks:
        if task in done and not task.cancelled() and task.exception() is not None:
            raise task.exception()

    return [task.result() for task in tasks]


async def _cancel_all(tasks) -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
