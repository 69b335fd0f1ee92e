"""
Background Workers

Periodic session housekeeping. Expired sessions are already rejected on
lookup; the sweep only keeps the table from growing.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from staff_directory.api.auth.sessions import SessionStore
from staff_directory.api.config import settings

logger = logging.getLogger(__name__)


@dataclass
class WorkerStats:
    """Statistics for a background worker."""
    name: str
    started_at: datetime
    last_run_at: Optional[datetime] = None
    run_count: int = 0
    removed_count: int = 0
    error_count: int = 0
    last_error: Optional[str] = None


async def sweep_configured_sessions() -> int:
    """Sweep expired sessions from the configured storage backend."""
    from staff_directory.api.dependencies import open_repositories

    async with open_repositories() as repos:
        return await SessionStore(repos.sessions).sweep_expired()


class SessionSweepWorker:
    """Removes expired sessions on a fixed interval."""

    def __init__(
        self,
        interval_seconds: int = 3600,
        sweep: Callable[[], Awaitable[int]] = sweep_configured_sessions,
    ):
        self.interval = interval_seconds
        self._sweep = sweep
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._stats = WorkerStats(
            name="session_sweep",
            started_at=datetime.now(timezone.utc),
        )

    async def start(self) -> None:
        """Start the sweep worker."""
        if self._running:
            return

        self._running = True
        self._stats.started_at = datetime.now(timezone.utc)
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Session sweep worker started (every %ss)", self.interval)

    async def stop(self) -> None:
        """Stop the sweep worker."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Session sweep worker stopped")

    async def _run_loop(self) -> None:
        """Main worker loop."""
        while self._running:
            try:
                await asyncio.sleep(self.interval)
                await self.run_once()
            except asyncio.CancelledError:
                break

    async def run_once(self) -> int:
        """Run a single sweep, recording but not raising failures."""
        try:
            removed = await self._sweep()
        except Exception as e:
            logger.error("Session sweep error: %s", e)
            self._stats.error_count += 1
            self._stats.last_error = str(e)
            return 0

        self._stats.run_count += 1
        self._stats.removed_count += removed
        self._stats.last_run_at = datetime.now(timezone.utc)
        return removed

    def get_stats(self) -> WorkerStats:
        """Get worker statistics."""
        return self._stats


# Global worker
_sweep_worker: Optional[SessionSweepWorker] = None


async def init_background_workers() -> None:
    """Start the session sweep worker unless disabled."""
    global _sweep_worker
    if settings.SESSION_SWEEP_INTERVAL_SECONDS <= 0 or _sweep_worker is not None:
        return

    _sweep_worker = SessionSweepWorker(settings.SESSION_SWEEP_INTERVAL_SECONDS)
    await _sweep_worker.start()


async def close_background_workers() -> None:
    """Stop background workers."""
    global _sweep_worker
    if _sweep_worker:
        await _sweep_worker.stop()
        _sweep_worker = None
