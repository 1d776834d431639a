from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.tenant_repository import ITenantRepository
from src.domain.clock import utc_now
from src.domain.entities import (
    BillingProvider,
    SortDirection,
    Tenant,
    TenantSortField,
    TenantStatus,
)
from src.domain.errors import ConcurrencyConflictError

# Closed set of orderings for the tenant list; validated at startup
TENANT_SORT_COLUMNS = {
    TenantSortField.name: Tenant.normalized_name,
    TenantSortField.created_at: Tenant.created_at,
    TenantSortField.status: Tenant.status,
}


def validate_sort_columns() -> None:
    missing = [field.value for field in TenantSortField if field not in TENANT_SORT_COLUMNS]
    if missing:
        raise RuntimeError(f"Tenant sort fields without a column: {', '.join(missing)}")


class TenantRepository(ITenantRepository):
    """Tenant repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        """Get tenant by ID"""
        stmt = (
            select(Tenant)
            .where(Tenant.id == tenant_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_idempotency_token(self, token: str) -> Optional[Tenant]:
        stmt = select(Tenant).where(Tenant.idempotency_token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[Tenant]:
        stmt = select(Tenant).where(Tenant.normalized_name == name.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_domain(self, domain: str) -> Optional[Tenant]:
        stmt = select(Tenant).where(Tenant.domain == domain.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_customer_id(
        self, provider: BillingProvider, customer_id: str
    ) -> Optional[Tenant]:
        if provider == BillingProvider.paddle:
            column = Tenant.paddle_customer_id
        else:
            column = Tenant.stripe_customer_id
        stmt = select(Tenant).where(column == customer_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create(self, tenant: Tenant) -> Tenant:
        """Create a new tenant"""
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def compare_and_set(
        self, tenant: Tenant, expected_version: int, changes: Dict[str, Any]
    ) -> Tenant:
        stmt = (
            update(Tenant)
            .where(Tenant.id == tenant.id, Tenant.version == expected_version)
            .values(**changes, version=expected_version + 1, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrencyConflictError(tenant.id, expected_version)
        await self.session.refresh(tenant)
        return tenant

    async def list_by_status(
        self, statuses: Iterable[TenantStatus], limit: Optional[int] = None
    ) -> List[Tenant]:
        stmt = (
            select(Tenant)
            .where(Tenant.status.in_(list(statuses)))
            .order_by(Tenant.created_at)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_page(
        self,
        status: Optional[TenantStatus],
        sort_field: TenantSortField,
        direction: SortDirection,
        offset: int,
        limit: int,
    ) -> Tuple[List[Tenant], int]:
        column = TENANT_SORT_COLUMNS[sort_field]
        ordering = column.desc() if direction == SortDirection.desc else column.asc()

        stmt = select(Tenant)
        count_stmt = select(func.count()).select_from(Tenant)
        if status is not None:
            stmt = stmt.where(Tenant.status == status)
            count_stmt = count_stmt.where(Tenant.status == status)

        stmt = stmt.order_by(ordering, Tenant.id).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        total = (await self.session.execute(count_stmt)).scalar_one()
        return list(result.scalars().all()), total
