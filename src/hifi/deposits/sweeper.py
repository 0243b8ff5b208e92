"""Periodic eviction of old deposit records.

Records live only in process memory, so this is the bound on how many can
pile up. It is not part of the lifecycle: a deposit evicted mid-flight
simply stops being tracked and its orchestration task is cancelled.
"""

import asyncio
import logging
from typing import Optional

from hifi.deposits.models import DepositRecord
from hifi.deposits.store import DepositStore

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """Deletes records older than the retention window on a fixed period."""

    def __init__(
        self,
        store: DepositStore,
        retention_seconds: float = 3600.0,
        interval: float = 300.0,
        terminal_only: bool = False,
    ):
        """Initialize sweeper.

        Args:
            store: Store to sweep
            retention_seconds: Maximum record age
            interval: Seconds between sweeps
            terminal_only: Keep records that have not reached a terminal status
        """
        self.store = store
        self.retention_ms = int(retention_seconds * 1000)
        self.interval = interval
        self.terminal_only = terminal_only
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_once(self, now: Optional[int] = None) -> list[DepositRecord]:
        """Run a single sweep.

        Args:
            now: Epoch milliseconds to sweep as of (defaults to store clock)

        Returns:
            The evicted records
        """
        if now is None:
            now = self.store.clock()
        # Records aged exactly retention_ms are already out of the window
        cutoff = now - self.retention_ms + 1

        evicted = self.store.evict_older_than(cutoff, terminal_only=self.terminal_only)
        for record in evicted:
            if not record.is_terminal:
                logger.warning(
                    f"Evicted deposit {record.id} still {record.status.value} "
                    f"after {record.age_ms(now) // 1000}s"
                )

        if self.terminal_only:
            self._report_stuck(now)

        if evicted:
            logger.info(f"Retention sweep evicted {len(evicted)} deposit(s)")
        return evicted

    def _report_stuck(self, now: int) -> None:
        for record in self.store.values():
            if not record.is_terminal and record.age_ms(now) >= self.retention_ms:
                logger.warning(
                    f"Deposit {record.id} stuck in {record.status.value} "
                    f"for {record.age_ms(now) // 1000}s"
                )

    async def run(self) -> None:
        """Run continuous sweep loop."""
        logger.info(
            f"Starting retention sweeper (interval: {self.interval}s, "
            f"retention: {self.retention_ms // 1000}s, terminal_only: {self.terminal_only})"
        )

        while True:
            await asyncio.sleep(self.interval)
            try:
                self.sweep_once()
            except Exception as e:
                logger.error(f"Retention sweep error: {e}")

    def start(self) -> asyncio.Task:
        """Start the sweep loop as a background task."""
        if not self.running:
            self._task = asyncio.create_task(self.run(), name="retention-sweeper")
        return self._task

    async def stop(self) -> None:
        """Stop the sweep loop."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("Retention sweeper stopped")
        self._task = None
