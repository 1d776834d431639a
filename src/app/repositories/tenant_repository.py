from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from src.domain.entities import (
    BillingProvider,
    SortDirection,
    Tenant,
    TenantSortField,
    TenantStatus,
)


class ITenantRepository(ABC):
    """Tenant repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        """Get tenant by ID, always reloading current column values"""
        pass

    @abstractmethod
    async def get_by_idempotency_token(self, token: str) -> Optional[Tenant]:
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Tenant]:
        """Case-insensitive lookup by tenant name"""
        pass

    @abstractmethod
    async def get_by_domain(self, domain: str) -> Optional[Tenant]:
        pass

    @abstractmethod
    async def get_by_customer_id(
        self, provider: BillingProvider, customer_id: str
    ) -> Optional[Tenant]:
        pass

    @abstractmethod
    async def create(self, tenant: Tenant) -> Tenant:
        """Create a new tenant"""
        pass

    @abstractmethod
    async def compare_and_set(
        self, tenant: Tenant, expected_version: int, changes: Dict[str, Any]
    ) -> Tenant:
        """
        Apply changes only if the stored version equals expected_version.

        Bumps version by one. Raises ConcurrencyConflictError when no row
        matched.
        """
        pass

    @abstractmethod
    async def list_by_status(
        self, statuses: Iterable[TenantStatus], limit: Optional[int] = None
    ) -> List[Tenant]:
        pass

    @abstractmethod
    async def list_page(
        self,
        status: Optional[TenantStatus],
        sort_field: TenantSortField,
        direction: SortDirection,
        offset: int,
        limit: int,
    ) -> Tuple[List[Tenant], int]:
        """Return one page of tenants and the total count"""
        pass
