"""
Use Case: Get Usage Summary

Current period usage of the caller's tenant, cached per tenant.
"""

from libs.result import Error, Result, Return
from src.app.services.tenant_cache import ITenantCache
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_metrics_tracker import UsageMetricsTracker, UsageSummary
from src.domain.clock import Clock, utc_now
from src.domain.context import TenantContext

USAGE_SUMMARY_CACHE_KEY = "usage:summary"


class GetUsageSummaryUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        cache: ITenantCache = None,
        default_plan_name: str = "Free",
        ttl_seconds: float = 60,
        clock: Clock = utc_now,
    ):
        self.uow = uow
        self.cache = cache
        self.default_plan_name = default_plan_name
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    async def execute(self, context: TenantContext) -> Result[UsageSummary]:
        tenant_id = context.require_tenant_id("usage summary")

        async def load():
            async with self.uow:
                tenant = await self.uow.tenants.get_by_id(tenant_id)
                if not tenant:
                    return None
                tracker = UsageMetricsTracker(self.uow, self.default_plan_name, self.clock)
                summary = await tracker.get_usage_summary(tenant_id)
                # Keeps a lazily opened period row
                await self.uow.commit()
                return summary.model_dump(mode="json")

        if self.cache is not None:
            data = await self.cache.get_or_set(
                tenant_id, USAGE_SUMMARY_CACHE_KEY, load, self.ttl_seconds
            )
        else:
            data = await load()

        if data is None:
            return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))
        return Return.ok(UsageSummary.model_validate(data))
