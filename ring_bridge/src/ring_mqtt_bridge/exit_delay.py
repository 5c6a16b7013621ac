"""
Exit-delay watcher for the security panel.

A cancellable one-shot timer armed with the remaining exit delay. When it
fires the panel re-checks its data and publishes 'armed_away' if the
change-event that would normally do so never arrived.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional


class ExitDelayWatcher:
    """Owns at most one pending exit-delay timer."""

    def __init__(
        self,
        on_elapsed: Callable[[], None],
        sleep: Callable[[float], Awaitable[None]],
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize watcher.

        Args:
            on_elapsed: Called (on the loop) when the delay runs out
            sleep: Async sleep function
            logger: Optional logger
        """
        self._on_elapsed = on_elapsed
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, delay: float) -> None:
        """
        (Re)arm the timer, replacing any pending one.

        Args:
            delay: Seconds until the exit delay ends
        """
        self.cancel()
        self.logger.debug(f"Exit delay active, checking again in {delay:.1f}s")
        self._task = asyncio.get_running_loop().create_task(self._wait(delay))

    def cancel(self) -> None:
        """Cancel the pending timer, if any."""
        if self.pending:
            self._task.cancel()
        self._task = None

    async def _wait(self, delay: float) -> None:
        await self._sleep(delay)
        # Detach first so on_elapsed may reschedule
        self._task = None
        self._on_elapsed()
