"""
Use Case: Record Usage

Applies one atomic usage increment for the caller's tenant.
"""

from libs.result import Error, Result, Return
from src.app.services.tenant_cache import ITenantCache
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_metrics_tracker import UsageMetricsTracker
from src.domain.clock import Clock, utc_now
from src.domain.context import TenantContext
from src.domain.entities import TenantStatus

from .dtos import RecordUsageCommand, RecordUsageResponse, UsageCounter
from .get_usage_summary_use_case import USAGE_SUMMARY_CACHE_KEY


class RecordUsageUseCase:
    """
    Business Logic:
    1. Tenant must exist and be active
    2. Atomic increment of the selected counter in the current period
    3. Commit, then drop the cached usage summary
    """

    def __init__(
        self,
        uow: UnitOfWork,
        cache: ITenantCache = None,
        default_plan_name: str = "Free",
        clock: Clock = utc_now,
    ):
        self.uow = uow
        self.cache = cache
        self.default_plan_name = default_plan_name
        self.clock = clock

    async def execute(
        self, context: TenantContext, command: RecordUsageCommand
    ) -> Result[RecordUsageResponse]:
        tenant_id = context.require_tenant_id("usage recording")

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))
            if tenant.status != TenantStatus.active:
                return Return.err(
                    Error(
                        "INVALID_STATE_TRANSITION",
                        f"Usage cannot be recorded for tenant in status {tenant.status.value}",
                        reason=tenant.status.value,
                    )
                )

            tracker = UsageMetricsTracker(self.uow, self.default_plan_name, self.clock)
            if command.feature_key:
                await tracker.increment_feature_usage(tenant_id, command.feature_key, command.delta)
                recorded = f"feature:{command.feature_key}"
            else:
                increment = {
                    UsageCounter.employees: tracker.increment_employee_count,
                    UsageCounter.users: tracker.increment_user_count,
                    UsageCounter.departments: tracker.increment_department_count,
                    UsageCounter.storage_bytes: tracker.increment_storage_bytes,
                    UsageCounter.api_requests: tracker.increment_api_requests,
                }[command.counter]
                await increment(tenant_id, command.delta)
                recorded = command.counter.value

            await self.uow.commit()

        if self.cache is not None:
            await self.cache.remove(tenant_id, USAGE_SUMMARY_CACHE_KEY)

        return Return.ok(
            RecordUsageResponse(tenant_id=str(tenant_id), recorded=recorded, delta=command.delta)
        )
