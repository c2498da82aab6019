"""
Per-path debouncer for re-scan requests.

Every path owns at most one pending timer. A new request for the same path
cancels and restarts its timer, so a burst of edits produces one callback
after the quiet period.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Async debouncer keyed by file path.

    Attributes:
        delay_ms: Quiet period in milliseconds before a path fires
        on_ready: Async callback invoked with the path once it fires
    """

    def __init__(
        self,
        delay_ms: int = 500,
        on_ready: Callable[[Path], Awaitable[None]] | None = None,
    ):
        """
        Initialize the debouncer.

        Args:
            delay_ms: Debounce delay in milliseconds (default: 500)
            on_ready: Async callback to invoke when a path fires
        """
        self._delay_ms = delay_ms
        self._on_ready = on_ready
        self._timers: dict[Path, asyncio.Task[None]] = {}
        self._lock = asyncio.Lock()

    @property
    def delay_ms(self) -> int:
        """Get the debounce delay in milliseconds."""
        return self._delay_ms

    async def schedule(self, path: Path) -> None:
        """
        Schedule ``path`` to fire after the quiet period.

        Resets the timer if one is already pending for the path.

        Args:
            path: The path to schedule
        """
        async with self._lock:
            await self._cancel_locked(path)
            self._timers[path] = asyncio.create_task(self._timer_callback(path))

    async def cancel(self, path: Path) -> bool:
        """
        Cancel the pending timer for ``path``.

        Returns:
            True if a pending timer was cancelled
        """
        async with self._lock:
            return await self._cancel_locked(path)

    async def cancel_all(self) -> None:
        """Cancel every pending timer without firing it."""
        async with self._lock:
            for path in list(self._timers):
                await self._cancel_locked(path)

    async def _cancel_locked(self, path: Path) -> bool:
        task = self._timers.pop(path, None)
        if task is None or task.done():
            return False

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return True

    async def _timer_callback(self, path: Path) -> None:
        """Internal timer that fires after the debounce delay."""
        try:
            await asyncio.sleep(self._delay_ms / 1000.0)
        except asyncio.CancelledError:
            return

        async with self._lock:
            # A newer timer owns the path
            if self._timers.get(path) is not asyncio.current_task():
                return
            del self._timers[path]

        await self._emit(path)

    async def _emit(self, path: Path) -> None:
        if self._on_ready is None:
            return
        try:
            await self._on_ready(path)
        except Exception as e:
            logger.error(f"Error in debounce callback for {path}: {e}")

    async def flush(self) -> list[Path]:
        """
        Immediately fire every pending path.

        Returns:
            The paths that were pending, in scheduling order
        """
        async with self._lock:
            paths = list(self._timers)
            for path in paths:
                await self._cancel_locked(path)

        for path in paths:
            await self._emit(path)

        return paths

    def has_pending(self) -> bool:
        """Check if any path is waiting to fire."""
        return any(not task.done() for task in self._timers.values())

    def pending_paths(self) -> list[Path]:
        """Get the paths that are waiting to fire."""
        return [path for path, task in self._timers.items() if not task.done()]

    def get_pending_count(self) -> int:
        """Get the number of paths waiting to fire."""
        return len(self.pending_paths())
