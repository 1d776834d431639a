from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.domain.entities import TenantLifecycleEvent


class ILifecycleEventRepository(ABC):
    """Lifecycle event repository interface - append only"""

    @abstractmethod
    async def append(self, event: TenantLifecycleEvent) -> TenantLifecycleEvent:
        pass

    @abstractmethod
    async def list_by_tenant(
        self, tenant_id: UUID, limit: int = 50, offset: int = 0
    ) -> List[TenantLifecycleEvent]:
        """Newest first"""
        pass

    @abstractmethod
    async def count_by_tenant(self, tenant_id: UUID) -> int:
        pass
