from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.subscription_repository import (
    ISubscriptionPlanRepository,
    ISubscriptionRepository,
)
from src.domain.entities import Subscription, SubscriptionPlan, SubscriptionStatus


class SubscriptionPlanRepository(ISubscriptionPlanRepository):
    """Subscription plan repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, plan_id: UUID) -> Optional[SubscriptionPlan]:
        stmt = select(SubscriptionPlan).where(SubscriptionPlan.id == plan_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[SubscriptionPlan]:
        stmt = select(SubscriptionPlan).where(SubscriptionPlan.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active(self) -> List[SubscriptionPlan]:
        stmt = (
            select(SubscriptionPlan)
            .where(SubscriptionPlan.is_active == True)  # noqa: E712
            .order_by(SubscriptionPlan.display_order)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, plan: SubscriptionPlan) -> SubscriptionPlan:
        self.session.add(plan)
        await self.session.flush()
        await self.session.refresh(plan)
        return plan


class SubscriptionRepository(ISubscriptionRepository):
    """Subscription repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_by_tenant(self, tenant_id: UUID) -> Optional[Subscription]:
        stmt = (
            select(Subscription)
            .where(
                Subscription.tenant_id == tenant_id,
                Subscription.status.in_(
                    [SubscriptionStatus.active, SubscriptionStatus.trialing]
                ),
            )
            .order_by(Subscription.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, subscription: Subscription) -> Subscription:
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def update(self, subscription: Subscription) -> Subscription:
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription
