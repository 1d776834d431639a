from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type, TypeVar
from uuid import UUID

from src.domain.context import TenantContext
from src.domain.entities import TenantScopedModel

M = TypeVar("M", bound=TenantScopedModel)


class ITenantDataRepository(ABC):
    """
    Tenant-scoped data access - application layer.

    Every method takes the caller's TenantContext; implementations must
    restrict reads and writes to that tenant unless the context is elevated
    across all tenants.
    """

    @abstractmethod
    async def list(
        self,
        context: TenantContext,
        model: Type[M],
        *criteria: Any,
        order_by: Any = None,
        limit: Optional[int] = None,
    ) -> List[M]:
        pass

    @abstractmethod
    async def get(self, context: TenantContext, model: Type[M], entity_id: UUID) -> Optional[M]:
        pass

    @abstractmethod
    async def find_one(self, context: TenantContext, model: Type[M], *criteria: Any) -> Optional[M]:
        pass

    @abstractmethod
    async def count(self, context: TenantContext, model: Type[M], *criteria: Any) -> int:
        pass

    @abstractmethod
    async def add(self, context: TenantContext, entity: M) -> M:
        """Insert or update, stamping tenant_id from the context"""
        pass

    @abstractmethod
    async def purge_tenant(self, context: TenantContext, tenant_id: UUID) -> Dict[str, int]:
        """Delete every tenant-scoped row of tenant_id; requires an elevated context"""
        pass
