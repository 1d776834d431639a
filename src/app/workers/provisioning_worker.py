import asyncio
import logging
from typing import Optional

from src.app.services.email_service import IEmailService
from src.app.use_cases.provisioning import ProvisionTenantCommand, ProvisionTenantUseCase
from src.domain.entities import TenantStatus

from .periodic_worker import PeriodicWorker, UnitOfWorkScope

logger = logging.getLogger(__name__)


class ProvisioningWorker(PeriodicWorker):
    """Picks up tenants still in provisioning and runs (or resumes) the orchestrator"""

    name = "provisioning"

    def __init__(
        self,
        uow_scope: UnitOfWorkScope,
        email_service: IEmailService,
        interval_seconds: float = 10,
        batch_size: int = 5,
        default_plan_name: str = "Free",
        timeout_seconds: float = 60,
    ):
        super().__init__(interval_seconds)
        self.uow_scope = uow_scope
        self.email_service = email_service
        self.batch_size = batch_size
        self.default_plan_name = default_plan_name
        self.timeout_seconds = timeout_seconds

    async def run_once(self, stop_event: Optional[asyncio.Event] = None) -> int:
        async with self.uow_scope() as uow:
            async with uow:
                pending = await uow.tenants.list_by_status(
                    [TenantStatus.provisioning], limit=self.batch_size
                )
                tenant_ids = [tenant.id for tenant in pending]

        provisioned = 0
        for tenant_id in tenant_ids:
            if stop_event is not None and stop_event.is_set():
                break
            async with self.uow_scope() as uow:
                use_case = ProvisionTenantUseCase(
                    uow,
                    self.email_service,
                    default_plan_name=self.default_plan_name,
                    timeout_seconds=self.timeout_seconds,
                )
                result = await use_case.execute(
                    tenant_id, ProvisionTenantCommand(triggered_by="provisioning-worker")
                )
            if result.is_ok():
                provisioned += 1
            else:
                logger.warning(
                    f"Provisioning tenant {tenant_id}: {result.error.code} {result.error.message}"
                )
        return provisioned
