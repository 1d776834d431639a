"""
Standalone background worker: provisioning and reconciliation loops
without the HTTP API. Stops cleanly on SIGINT/SIGTERM.
"""

import asyncio
import logging
import signal

from sqlmodel import SQLModel

from config import ApplicationConfig
from src.adapter.repositories.tenant_repository import validate_sort_columns
from src.app.workers.runner import build_workers, start_workers, stop_workers
from src.depends import engine, get_email_service, unit_of_work_scope

logging.basicConfig(
    level=ApplicationConfig.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def main():
    validate_sort_columns()
    if ApplicationConfig.AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    workers = build_workers(ApplicationConfig, unit_of_work_scope, get_email_service())
    tasks = start_workers(workers, stop_event)
    logger.info(f"Started {len(tasks)} workers")

    await stop_event.wait()
    await stop_workers(tasks, stop_event)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
