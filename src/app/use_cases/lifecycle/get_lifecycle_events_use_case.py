"""
Use Case: Get Tenant Lifecycle Events

Lifecycle history of one tenant, newest first. Available after hard delete.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import LifecycleEventInfo, LifecycleEventsResponse


class GetLifecycleEventsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, tenant_id: UUID, limit: int = 50, offset: int = 0
    ) -> Result[LifecycleEventsResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            events = await self.uow.lifecycle_events.list_by_tenant(tenant_id, limit, offset)
            total = await self.uow.lifecycle_events.count_by_tenant(tenant_id)

            return Return.ok(
                LifecycleEventsResponse(
                    tenant_id=str(tenant_id),
                    events=[
                        LifecycleEventInfo(
                            id=str(event.id),
                            event_type=event.event_type.value,
                            previous_status=event.previous_status.value
                            if event.previous_status
                            else None,
                            new_status=event.new_status.value,
                            reason=event.reason,
                            triggered_by=event.triggered_by,
                            metadata=event.event_metadata or {},
                            occurred_at=event.occurred_at,
                        )
                        for event in events
                    ],
                    total=total,
                )
            )
