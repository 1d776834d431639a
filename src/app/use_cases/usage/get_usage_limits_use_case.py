"""
Use Case: Get Usage Limits

Per-resource usage against the effective plan. Exceeded resources are
reported, not enforced.
"""

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_metrics_tracker import UsageMetricsTracker
from src.domain.clock import Clock, utc_now
from src.domain.context import TenantContext

from .dtos import UsageLimitsResponse


class GetUsageLimitsUseCase:
    def __init__(self, uow: UnitOfWork, default_plan_name: str = "Free", clock: Clock = utc_now):
        self.uow = uow
        self.default_plan_name = default_plan_name
        self.clock = clock

    async def execute(self, context: TenantContext) -> Result[UsageLimitsResponse]:
        tenant_id = context.require_tenant_id("usage limits")

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            tracker = UsageMetricsTracker(self.uow, self.default_plan_name, self.clock)
            plan = await tracker.get_effective_plan(tenant_id)
            limits = await tracker.evaluate_limits(tenant_id)
            await self.uow.commit()

            return Return.ok(
                UsageLimitsResponse(
                    tenant_id=str(tenant_id),
                    plan_name=plan.name if plan else None,
                    limits=limits,
                )
            )
