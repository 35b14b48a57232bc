"""
Background state refresh.

Reclassifies every animal once at startup and then on a fixed interval, so
moods decay toward resting purely from elapsed time. Fire-and-forget: nothing
awaits a tick, and stop() tears the task down when the session ends.
"""

import asyncio
import logging

from src.config import STATE_REFRESH_INTERVAL_SECONDS
from src.services.farm_service import FarmService

logger = logging.getLogger(__name__)


class StateRefreshScheduler:
    """
    Background task calling FarmService.refresh_states().

    Per-animal atomicity is provided by the service's locks, so a tick can
    run alongside user-triggered check-ins.
    """

    def __init__(self, service: FarmService, interval: float = STATE_REFRESH_INTERVAL_SECONDS):
        """
        Initialize the scheduler.

        Args:
            service: Farm service whose animals are refreshed
            interval: Seconds between ticks
        """
        self.service = service
        self.interval = interval
        self._running = False
        self._task = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Run one refresh now and schedule the recurring ones."""
        if self._running:
            logger.warning("State refresh scheduler is already running")
            return

        self._running = True
        await asyncio.to_thread(self._refresh_once)
        self._task = asyncio.create_task(self._refresh_loop())
        logger.info(f"State refresh scheduler started (interval: {self.interval}s)")

    async def stop(self):
        """Cancel the background task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("State refresh scheduler stopped")

    def _refresh_once(self):
        # Runs in a worker thread: commits write the snapshot file synchronously
        try:
            self.service.refresh_states()
        except Exception as e:
            logger.error(f"Error refreshing animal states: {e}", exc_info=True)

    async def _refresh_loop(self):
        """Main refresh loop; the startup tick already ran in start()."""
        while self._running:
            await asyncio.sleep(self.interval)
            await asyncio.to_thread(self._refresh_once)

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
        return False
