from typing import List
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.lifecycle_event_repository import ILifecycleEventRepository
from src.domain.entities import TenantLifecycleEvent


class LifecycleEventRepository(ILifecycleEventRepository):
    """Lifecycle event repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, event: TenantLifecycleEvent) -> TenantLifecycleEvent:
        """Create a new lifecycle event (immutable)"""
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def list_by_tenant(
        self, tenant_id: UUID, limit: int = 50, offset: int = 0
    ) -> List[TenantLifecycleEvent]:
        stmt = (
            select(TenantLifecycleEvent)
            .where(TenantLifecycleEvent.tenant_id == tenant_id)
            .order_by(TenantLifecycleEvent.occurred_at.desc(), TenantLifecycleEvent.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_tenant(self, tenant_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(TenantLifecycleEvent)
            .where(TenantLifecycleEvent.tenant_id == tenant_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
