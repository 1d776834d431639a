"""
Use Case: Switch Subscription Plan

Moves a tenant to another plan, keeping at most one active subscription.
"""

import logging
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.tenant_cache import ITenantCache
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.usage import USAGE_SUMMARY_CACHE_KEY
from src.domain.clock import Clock, utc_now
from src.domain.entities import (
    BillingProvider,
    Subscription,
    SubscriptionStatus,
    TenantLifecycleEvent,
    TenantLifecycleEventType,
    TenantStatus,
)
from src.domain.errors import ConcurrencyConflictError
from src.domain.metadata import normalize_metadata

from .dtos import SwitchPlanResponse

logger = logging.getLogger(__name__)


class SwitchPlanUseCase:
    """
    Business Logic:
    1. Tenant must exist and be active or suspended
    2. Plan must exist and be active
    3. Bump the tenant version so concurrent switches cannot both win
    4. Cancel the current subscription (if any) and create the new one
    5. Record Upgraded or Downgraded by monthly price; status unchanged
    6. Commit, then drop the cached usage summary (it carries the plan name)
    """

    def __init__(self, uow: UnitOfWork, cache: ITenantCache = None, clock: Clock = utc_now):
        self.uow = uow
        self.cache = cache
        self.clock = clock

    async def execute(
        self, tenant_id: UUID, plan_id: UUID, triggered_by: str = None
    ) -> Result[SwitchPlanResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))
            if tenant.status not in (TenantStatus.active, TenantStatus.suspended):
                return Return.err(
                    Error(
                        "INVALID_STATE_TRANSITION",
                        f"Cannot change plan of tenant in status {tenant.status.value}",
                        reason=tenant.status.value,
                    )
                )

            new_plan = await self.uow.plans.get_by_id(plan_id)
            if not new_plan or not new_plan.is_active:
                return Return.err(Error("PLAN_NOT_FOUND", "Subscription plan not found"))

            current = await self.uow.subscriptions.get_active_by_tenant(tenant_id)
            if current and current.plan_id == new_plan.id:
                return Return.err(Error("PLAN_UNCHANGED", "Tenant is already on this plan"))

            try:
                tenant = await self.uow.tenants.compare_and_set(tenant, tenant.version, {})
            except ConcurrencyConflictError as exc:
                logger.warning(f"Concurrent plan switch on tenant {tenant_id}: {exc}")
                return Return.err(
                    Error(
                        "CONCURRENCY_CONFLICT",
                        "Tenant was modified concurrently, retry the operation",
                        reason="switch_plan",
                    )
                )

            current_plan = None
            if current:
                current_plan = await self.uow.plans.get_by_id(current.plan_id)
                current.status = SubscriptionStatus.cancelled
                current.cancelled_at = self.clock()
                await self.uow.subscriptions.update(current)

            subscription = await self.uow.subscriptions.create(
                Subscription(
                    tenant_id=tenant_id,
                    plan_id=new_plan.id,
                    status=SubscriptionStatus.active,
                    provider=current.provider if current else BillingProvider.manual,
                    external_customer_id=current.external_customer_id if current else None,
                )
            )

            old_price = current_plan.monthly_price if current_plan else 0.0
            upgraded = new_plan.monthly_price >= old_price
            event_type = (
                TenantLifecycleEventType.upgraded if upgraded else TenantLifecycleEventType.downgraded
            )
            await self.uow.lifecycle_events.append(
                TenantLifecycleEvent(
                    tenant_id=tenant_id,
                    event_type=event_type,
                    previous_status=tenant.status,
                    new_status=tenant.status,
                    reason=f"Plan changed to {new_plan.name}",
                    triggered_by=triggered_by,
                    event_metadata=normalize_metadata(
                        {
                            "previous_plan": current_plan.name if current_plan else None,
                            "new_plan": new_plan.name,
                            "previous_price": old_price,
                            "new_price": new_plan.monthly_price,
                        }
                    ),
                    occurred_at=self.clock(),
                )
            )

            await self.uow.commit()
            logger.info(f"Tenant {tenant_id} moved to plan {new_plan.name} ({event_type.value})")

            response = SwitchPlanResponse(
                tenant_id=str(tenant_id),
                previous_plan=current_plan.name if current_plan else None,
                new_plan=new_plan.name,
                change=event_type.value,
                subscription_id=str(subscription.id),
            )

        if self.cache is not None:
            await self.cache.remove(tenant_id, USAGE_SUMMARY_CACHE_KEY)
        return Return.ok(response)
