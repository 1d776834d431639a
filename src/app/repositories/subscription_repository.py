from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Subscription, SubscriptionPlan


class ISubscriptionPlanRepository(ABC):
    """Subscription plan repository interface"""

    @abstractmethod
    async def get_by_id(self, plan_id: UUID) -> Optional[SubscriptionPlan]:
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[SubscriptionPlan]:
        pass

    @abstractmethod
    async def list_active(self) -> List[SubscriptionPlan]:
        pass

    @abstractmethod
    async def create(self, plan: SubscriptionPlan) -> SubscriptionPlan:
        pass


class ISubscriptionRepository(ABC):
    """Subscription repository interface"""

    @abstractmethod
    async def get_active_by_tenant(self, tenant_id: UUID) -> Optional[Subscription]:
        """Active or trialing subscription of the tenant, if any"""
        pass

    @abstractmethod
    async def create(self, subscription: Subscription) -> Subscription:
        pass

    @abstractmethod
    async def update(self, subscription: Subscription) -> Subscription:
        pass
