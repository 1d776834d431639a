import asyncio
import logging
from typing import List

from src.app.services.email_service import IEmailService
from src.app.services.tenant_cache import ITenantCache

from .periodic_worker import PeriodicWorker, UnitOfWorkScope
from .provisioning_worker import ProvisioningWorker
from .reconciliation_loop import ReconciliationLoop

logger = logging.getLogger(__name__)


def build_workers(
    config,
    uow_scope: UnitOfWorkScope,
    email_service: IEmailService,
    cache: ITenantCache = None,
) -> List[PeriodicWorker]:
    return [
        ProvisioningWorker(
            uow_scope,
            email_service,
            interval_seconds=config.PROVISIONING_INTERVAL_SECONDS,
            batch_size=config.PROVISIONING_BATCH_SIZE,
            default_plan_name=config.DEFAULT_PLAN_NAME,
            timeout_seconds=config.PROVISIONING_TIMEOUT_SECONDS,
        ),
        ReconciliationLoop(
            uow_scope,
            interval_seconds=config.RECONCILIATION_INTERVAL_SECONDS,
            grace_period_days=config.DEFAULT_GRACE_PERIOD_DAYS,
            retention_days=config.DEFAULT_RETENTION_DAYS,
            default_plan_name=config.DEFAULT_PLAN_NAME,
            tenant_timeout_seconds=config.TENANT_OPERATION_TIMEOUT_SECONDS,
            cache=cache,
        ),
    ]


def start_workers(workers: List[PeriodicWorker], stop_event: asyncio.Event) -> List[asyncio.Task]:
    return [
        asyncio.create_task(worker.run(stop_event), name=f"worker:{worker.name}")
        for worker in workers
    ]


async def stop_workers(tasks: List[asyncio.Task], stop_event: asyncio.Event, timeout: float = 30) -> None:
    stop_event.set()
    done, pending = await asyncio.wait(tasks, timeout=timeout)
    for task in pending:
        logger.warning(f"{task.get_name()} did not stop in {timeout}s, cancelling")
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
