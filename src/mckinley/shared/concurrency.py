"""Bounded offloading of blocking work.

Multipart bodies read files and encode images synchronously; running that on
the event loop would stall every other in-flight call.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from typing import ParamSpec, TypeVar

_P = ParamSpec("_P")
_T = TypeVar("_T")


def default_thread_limit() -> int:
    cpu = os.cpu_count() or 4
    return max(4, min(32, cpu * 4))


class BlockingIOLimiter:
    """Runs blocking callables in worker threads, at most ``limit`` at a time.

    The semaphore is created for the event loop that first uses it and
    replaced when the limiter is used from a different loop.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.limit = limit or default_thread_limit()
        self._semaphore: asyncio.Semaphore | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def _semaphore_for_running_loop(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._loop is not loop:
            self._semaphore = asyncio.Semaphore(self.limit)
            self._loop = loop
        return self._semaphore

    async def run(self, func: Callable[_P, _T], /, *args: _P.args, **kwargs: _P.kwargs) -> _T:
        async with self._semaphore_for_running_loop():
            return await asyncio.to_thread(func, *args, **kwargs)
