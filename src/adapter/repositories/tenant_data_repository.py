import logging
from typing import Any, Dict, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import delete, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.isolation import scope_statement, stamp_tenant
from src.app.repositories.tenant_data_repository import ITenantDataRepository
from src.domain.context import TenantContext
from src.domain.entities import TENANT_SCOPED_MODELS, TenantScopedModel
from src.domain.errors import CrossTenantAccessError, ElevationRequiredError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=TenantScopedModel)


class TenantDataRepository(ITenantDataRepository):
    """Tenant-scoped data access through the isolation enforcer"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(
        self,
        context: TenantContext,
        model: Type[M],
        *criteria: Any,
        order_by: Any = None,
        limit: Optional[int] = None,
    ) -> List[M]:
        stmt = scope_statement(select(model), model, context)
        if criteria:
            stmt = stmt.where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, context: TenantContext, model: Type[M], entity_id: UUID) -> Optional[M]:
        return await self.find_one(context, model, model.id == entity_id)

    async def find_one(self, context: TenantContext, model: Type[M], *criteria: Any) -> Optional[M]:
        stmt = scope_statement(select(model), model, context)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def count(self, context: TenantContext, model: Type[M], *criteria: Any) -> int:
        stmt = scope_statement(select(func.count()).select_from(model), model, context)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def add(self, context: TenantContext, entity: M) -> M:
        stamp_tenant(entity, context)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def purge_tenant(self, context: TenantContext, tenant_id: UUID) -> Dict[str, int]:
        if context is None or not context.elevated:
            raise ElevationRequiredError(f"purge of tenant {tenant_id}")
        if not context.is_cross_tenant and context.tenant_id != tenant_id:
            raise CrossTenantAccessError(context.tenant_id, tenant_id)

        purged = {}
        for model in TENANT_SCOPED_MODELS:
            result = await self.session.execute(
                delete(model)
                .where(model.tenant_id == tenant_id)
                .execution_options(synchronize_session=False)
            )
            purged[model.__tablename__] = result.rowcount or 0
        logger.info(f"Purged tenant-scoped data for tenant {tenant_id}: {purged}")
        return purged
