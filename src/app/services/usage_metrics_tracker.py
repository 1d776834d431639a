"""
Usage Metrics Tracker

Per-tenant, per-month usage counters and plan limit checks. Runs inside
the caller's open unit of work and never commits.
"""

import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel

from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import Clock, utc_now
from src.domain.entities import SubscriptionPlan, TenantUsageMetrics, UsageResource

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = 0.9


def period_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """Calendar month containing moment, as [start, next month start)"""
    start = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


class ResourceUsage(BaseModel):
    resource: UsageResource
    usage: int
    limit: Optional[int] = None
    exceeded: bool = False
    warning: bool = False


class UsageSummary(BaseModel):
    tenant_id: str
    plan_name: Optional[str] = None
    period_start: datetime
    period_end: datetime
    employee_count: int
    user_count: int
    department_count: int
    api_request_count: int
    api_requests_today: int
    storage_bytes_used: int
    feature_usage: Dict[str, int]
    limits: List[ResourceUsage]


class UsageMetricsTracker:
    def __init__(
        self,
        uow: UnitOfWork,
        default_plan_name: str = "Free",
        clock: Clock = utc_now,
    ):
        self.uow = uow
        self.default_plan_name = default_plan_name
        self.clock = clock

    async def current_metrics(self, tenant_id: UUID) -> TenantUsageMetrics:
        """Current period row, created on first use with levels carried forward"""
        start, end = period_bounds(self.clock())
        metrics = await self.uow.usage_metrics.get_for_period(tenant_id, start)
        if metrics is not None:
            return metrics

        previous = await self.uow.usage_metrics.get_latest_before(tenant_id, start)
        metrics = TenantUsageMetrics(
            tenant_id=tenant_id,
            period_start=start,
            period_end=end,
            employee_count=previous.employee_count if previous else 0,
            user_count=previous.user_count if previous else 0,
            department_count=previous.department_count if previous else 0,
            storage_bytes_used=previous.storage_bytes_used if previous else 0,
        )
        logger.info(f"Opening usage period {start.date()} for tenant {tenant_id}")
        return await self.uow.usage_metrics.create_if_absent(metrics)

    # Increments

    async def _increment(self, tenant_id: UUID, column: str, delta: int) -> None:
        metrics = await self.current_metrics(tenant_id)
        await self.uow.usage_metrics.increment(tenant_id, metrics.period_start, {column: delta})

    async def increment_employee_count(self, tenant_id: UUID, delta: int = 1) -> None:
        await self._increment(tenant_id, "employee_count", delta)

    async def increment_user_count(self, tenant_id: UUID, delta: int = 1) -> None:
        await self._increment(tenant_id, "user_count", delta)

    async def increment_department_count(self, tenant_id: UUID, delta: int = 1) -> None:
        await self._increment(tenant_id, "department_count", delta)

    async def increment_storage_bytes(self, tenant_id: UUID, delta: int) -> None:
        await self._increment(tenant_id, "storage_bytes_used", delta)

    async def increment_api_requests(self, tenant_id: UUID, count: int = 1) -> None:
        metrics = await self.current_metrics(tenant_id)
        await self.uow.usage_metrics.record_api_requests(
            tenant_id, metrics.period_start, self.clock().date(), count
        )

    async def increment_feature_usage(self, tenant_id: UUID, feature_key: str, delta: int = 1) -> None:
        metrics = await self.current_metrics(tenant_id)
        await self.uow.usage_metrics.increment_feature(
            tenant_id, metrics.period_start, feature_key, delta
        )

    # Plan limits

    async def get_effective_plan(self, tenant_id: UUID) -> Optional[SubscriptionPlan]:
        subscription = await self.uow.subscriptions.get_active_by_tenant(tenant_id)
        if subscription is not None:
            plan = await self.uow.plans.get_by_id(subscription.plan_id)
            if plan is not None:
                return plan
        return await self.uow.plans.get_by_name(self.default_plan_name)

    def _api_requests_today(self, metrics: TenantUsageMetrics, today: date) -> int:
        if metrics.last_api_request_date == today:
            return metrics.api_request_count_today
        return 0

    def _usage_of(self, metrics: TenantUsageMetrics, resource: UsageResource) -> int:
        if resource == UsageResource.employees:
            return metrics.employee_count
        if resource == UsageResource.users:
            return metrics.user_count
        if resource == UsageResource.storage:
            return metrics.storage_bytes_used
        return self._api_requests_today(metrics, self.clock().date())

    @staticmethod
    def _limit_of(plan: SubscriptionPlan, resource: UsageResource) -> Optional[int]:
        return {
            UsageResource.employees: plan.max_employees,
            UsageResource.users: plan.max_users,
            UsageResource.storage: plan.max_storage_bytes,
            UsageResource.api_requests: plan.api_limit_per_day,
        }[resource]

    async def check_limit(self, tenant_id: UUID, resource: UsageResource) -> bool:
        """True while usage is strictly below the plan limit; a missing limit means unlimited"""
        plan = await self.get_effective_plan(tenant_id)
        if plan is None:
            logger.warning(f"No plan found for tenant {tenant_id}; denying {resource.value}")
            return False
        limit = self._limit_of(plan, resource)
        if limit is None:
            return True
        metrics = await self.current_metrics(tenant_id)
        return self._usage_of(metrics, resource) < limit

    async def check_employee_limit(self, tenant_id: UUID) -> bool:
        return await self.check_limit(tenant_id, UsageResource.employees)

    async def check_user_limit(self, tenant_id: UUID) -> bool:
        return await self.check_limit(tenant_id, UsageResource.users)

    async def check_storage_limit(self, tenant_id: UUID) -> bool:
        return await self.check_limit(tenant_id, UsageResource.storage)

    async def check_api_rate_limit(self, tenant_id: UUID) -> bool:
        return await self.check_limit(tenant_id, UsageResource.api_requests)

    async def evaluate_limits(self, tenant_id: UUID) -> List[ResourceUsage]:
        """Usage against every plan limit; exceeded once usage reaches the limit"""
        plan = await self.get_effective_plan(tenant_id)
        metrics = await self.current_metrics(tenant_id)

        report = []
        for resource in UsageResource:
            usage = self._usage_of(metrics, resource)
            limit = self._limit_of(plan, resource) if plan is not None else None
            exceeded = limit is not None and usage >= limit
            warning = limit is not None and not exceeded and usage >= limit * WARNING_THRESHOLD
            report.append(
                ResourceUsage(
                    resource=resource, usage=usage, limit=limit, exceeded=exceeded, warning=warning
                )
            )
        return report

    async def get_usage_summary(self, tenant_id: UUID) -> UsageSummary:
        plan = await self.get_effective_plan(tenant_id)
        metrics = await self.current_metrics(tenant_id)
        features = await self.uow.usage_metrics.get_feature_usage(tenant_id, metrics.period_start)
        return UsageSummary(
            tenant_id=str(tenant_id),
            plan_name=plan.name if plan else None,
            period_start=metrics.period_start,
            period_end=metrics.period_end,
            employee_count=metrics.employee_count,
            user_count=metrics.user_count,
            department_count=metrics.department_count,
            api_request_count=metrics.api_request_count,
            api_requests_today=self._api_requests_today(metrics, self.clock().date()),
            storage_bytes_used=metrics.storage_bytes_used,
            feature_usage=features,
            limits=await self.evaluate_limits(tenant_id),
        )
