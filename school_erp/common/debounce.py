"""Cancellable trailing-edge debounce for search-as-you-type pages."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Run *func* once, *delay* seconds after the last ``trigger()``.

    Only one timer is ever pending: each trigger cancels the previous one, so
    a burst of keystrokes produces a single request carrying the final value.
    """

    def __init__(
        self,
        func: Callable[..., Awaitable[Any]],
        delay: float = 0.3,
    ) -> None:
        self._func = func
        self._delay = delay
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        """(Re)start the timer; must be called from a running event loop."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire(args, kwargs))
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def flush(self) -> None:
        """Wait for the pending call, if any, to finish."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _fire(self, args: tuple, kwargs: dict) -> None:
        await asyncio.sleep(self._delay)
        try:
            await self._func(*args, **kwargs)
        except Exception:
            logger.exception("Debounced call %r failed", self._func)
