import asyncio
import logging
from typing import AsyncContextManager, Callable, Optional

from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

# Opens a fresh session per call; each tick and each tenant gets its own
UnitOfWorkScope = Callable[[], AsyncContextManager[UnitOfWork]]


class PeriodicWorker:
    """
    Runs run_once every interval_seconds until stop_event is set.

    A failing tick is logged and the loop continues. The wait between ticks
    ends early when stop_event is set.
    """

    name = "worker"

    def __init__(self, interval_seconds: float):
        self.interval_seconds = interval_seconds

    async def run_once(self, stop_event: Optional[asyncio.Event] = None):
        raise NotImplementedError

    async def run(self, stop_event: asyncio.Event) -> None:
        logger.info(f"{self.name} started (interval {self.interval_seconds}s)")
        while not stop_event.is_set():
            try:
                await self.run_once(stop_event)
            except Exception:
                logger.exception(f"{self.name} tick failed")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
        logger.info(f"{self.name} stopped")
