"""
Concurrency utilities.

`synchronized` serialises calls on an instance through its `_lock`
attribute. `run_serialized` is the awaitable counterpart used by the async
reminder facade: blocking work is pushed to a worker thread while an
``asyncio.Lock`` queues callers in order.
"""

from __future__ import annotations

import asyncio
from functools import wraps
from typing import Any, Callable, TypeVar

T = TypeVar("T")


def synchronized(func: Callable) -> Callable:
    """Decorator that holds ``self._lock`` for the duration of the call.

    Instances without a ``_lock`` attribute run unlocked.
    """

    @wraps(func)
    def _wrapped(self, *args, **kwargs):
        lock = getattr(self, "_lock", None)
        if lock is None:
            return func(self, *args, **kwargs)
        with lock:
            return func(self, *args, **kwargs)

    return _wrapped


async def run_serialized(lock: asyncio.Lock | None, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run ``func`` in a worker thread, optionally queued behind ``lock``.

    The worker is shielded from cancellation: once started, the call runs to
    completion even if the awaiting task is cancelled, and ``lock`` stays held
    until it has.
    """
    if lock is None:
        return await asyncio.shield(asyncio.to_thread(func, *args, **kwargs))
    async with lock:
        work = asyncio.ensure_future(asyncio.to_thread(func, *args, **kwargs))
        try:
            return await asyncio.shield(work)
        except asyncio.CancelledError:
            await asyncio.wait({work})
            raise
