"""
Use Case: Get Tenant Suspension Info

Read-only projection of a tenant's suspension state.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import Clock, utc_now
from src.domain.entities import TenantLifecycleEventType, TenantStatus
from src.domain.lifecycle import allowed_targets

from .dtos import TenantSuspensionInfo


class GetSuspensionInfoUseCase:
    """
    Business Logic:
    1. Load the tenant
    2. Take the reason from the latest suspension event
    3. can_reactivate while suspended with a transition back to active
       and the grace period has not ended
    """

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(self, tenant_id: UUID) -> Result[TenantSuspensionInfo]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            is_suspended = tenant.status == TenantStatus.suspended
            reason = None
            if is_suspended:
                events = await self.uow.lifecycle_events.list_by_tenant(tenant_id, limit=20)
                for event in events:
                    if event.event_type == TenantLifecycleEventType.suspended:
                        reason = event.reason
                        break

            can_reactivate = (
                is_suspended
                and TenantStatus.active in allowed_targets(tenant.status)
                and (
                    tenant.grace_period_ends_at is None
                    or self.clock() <= tenant.grace_period_ends_at
                )
            )

            return Return.ok(
                TenantSuspensionInfo(
                    tenant_id=str(tenant.id),
                    status=tenant.status.value,
                    is_suspended=is_suspended,
                    suspended_at=tenant.suspended_at,
                    grace_period_ends_at=tenant.grace_period_ends_at,
                    scheduled_deletion_at=tenant.scheduled_deletion_at,
                    reason=reason,
                    can_reactivate=can_reactivate,
                )
            )
