"""
Use Case: List Tenants

Paged tenant listing for superadmins, ordered by one of a closed set of
sort fields.
"""

from typing import Optional

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SortDirection, TenantSortField, TenantStatus

from .dtos import TenantListResponse, TenantSummary


class ListTenantsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        status: Optional[TenantStatus] = None,
        sort_by: TenantSortField = TenantSortField.created_at,
        direction: SortDirection = SortDirection.desc,
        page: int = 1,
        page_size: int = 20,
    ) -> Result[TenantListResponse]:
        page = max(page, 1)
        page_size = min(max(page_size, 1), 100)

        async with self.uow:
            tenants, total = await self.uow.tenants.list_page(
                status, sort_by, direction, (page - 1) * page_size, page_size
            )
            return Return.ok(
                TenantListResponse(
                    items=[
                        TenantSummary(
                            id=str(t.id),
                            name=t.name,
                            domain=t.domain,
                            status=t.status.value,
                            admin_email=t.admin_email,
                            is_subscription_active=t.is_subscription_active,
                            created_at=t.created_at,
                            suspended_at=t.suspended_at,
                            scheduled_deletion_at=t.scheduled_deletion_at,
                        )
                        for t in tenants
                    ],
                    total=total,
                    page=page,
                    page_size=page_size,
                )
            )
