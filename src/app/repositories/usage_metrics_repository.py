from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Dict, Optional
from uuid import UUID

from src.domain.entities import TenantUsageMetrics


class IUsageMetricsRepository(ABC):
    """Usage metrics repository interface"""

    @abstractmethod
    async def get_for_period(
        self, tenant_id: UUID, period_start: datetime
    ) -> Optional[TenantUsageMetrics]:
        pass

    @abstractmethod
    async def get_latest_before(
        self, tenant_id: UUID, period_start: datetime
    ) -> Optional[TenantUsageMetrics]:
        pass

    @abstractmethod
    async def create_if_absent(self, metrics: TenantUsageMetrics) -> TenantUsageMetrics:
        """Insert the period row unless a concurrent writer already did; return the stored row"""
        pass

    @abstractmethod
    async def increment(
        self, tenant_id: UUID, period_start: datetime, deltas: Dict[str, int]
    ) -> None:
        """Atomic in-database add of each delta to its counter column"""
        pass

    @abstractmethod
    async def record_api_requests(
        self, tenant_id: UUID, period_start: datetime, today: date, count: int
    ) -> None:
        """Atomic add to the period and daily API counters, resetting the daily one on a new day"""
        pass

    @abstractmethod
    async def increment_feature(
        self, tenant_id: UUID, period_start: datetime, feature_key: str, delta: int
    ) -> None:
        pass

    @abstractmethod
    async def get_feature_usage(self, tenant_id: UUID, period_start: datetime) -> Dict[str, int]:
        pass

    @abstractmethod
    async def delete_for_tenant(self, tenant_id: UUID) -> int:
        """Remove every usage and feature usage row of the tenant"""
        pass
