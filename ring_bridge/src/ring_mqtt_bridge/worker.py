"""
Per-device job queue.

All sync and command work for one device runs through a single queue
drained by one task, so jobs for the same device never interleave.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional


def _mark_retrieved(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()


class DeviceWorker:
    """Serializes a device's jobs on the running event loop."""

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or logging.getLogger(f"{__name__}.{name}")
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the worker task on the running loop (idempotent)."""
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the worker task and drop queued jobs."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        while not self._queue.empty():
            _, _, future = self._queue.get_nowait()
            future.cancel()
        self._task = None
        self._queue = None

    def submit(self, func: Callable[..., Any], *args: Any) -> asyncio.Future:
        """
        Queue a job without waiting for it.

        Args:
            func: Sync or async callable
            *args: Arguments for func

        Returns:
            Future resolved with the job's result
        """
        self.start()
        future = asyncio.get_running_loop().create_future()
        # Job errors are logged by the worker itself
        future.add_done_callback(_mark_retrieved)
        self._queue.put_nowait((func, args, future))
        return future

    async def run(self, func: Callable[..., Any], *args: Any) -> Any:
        """Queue a job and wait for its result."""
        return await self.submit(func, *args)

    async def _run(self) -> None:
        while True:
            func, args, future = await self._queue.get()
            try:
                result = func(*args)
                if inspect.isawaitable(result):
                    result = await result
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as e:
                name = getattr(func, "__name__", repr(func))
                self.logger.error(f"Error in job {name}: {e}", exc_info=True)
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)
