import logging
from datetime import date, datetime
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import case, delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.usage_metrics_repository import IUsageMetricsRepository
from src.domain.clock import utc_now
from src.domain.entities import TenantFeatureUsage, TenantUsageMetrics

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = {
    "employee_count": TenantUsageMetrics.employee_count,
    "user_count": TenantUsageMetrics.user_count,
    "department_count": TenantUsageMetrics.department_count,
    "storage_bytes_used": TenantUsageMetrics.storage_bytes_used,
    "api_request_count": TenantUsageMetrics.api_request_count,
}


class UsageMetricsRepository(IUsageMetricsRepository):
    """Usage metrics repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_period(
        self, tenant_id: UUID, period_start: datetime
    ) -> Optional[TenantUsageMetrics]:
        stmt = (
            select(TenantUsageMetrics)
            .where(
                TenantUsageMetrics.tenant_id == tenant_id,
                TenantUsageMetrics.period_start == period_start,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_latest_before(
        self, tenant_id: UUID, period_start: datetime
    ) -> Optional[TenantUsageMetrics]:
        stmt = (
            select(TenantUsageMetrics)
            .where(
                TenantUsageMetrics.tenant_id == tenant_id,
                TenantUsageMetrics.period_start < period_start,
            )
            .order_by(TenantUsageMetrics.period_start.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_if_absent(self, metrics: TenantUsageMetrics) -> TenantUsageMetrics:
        try:
            async with self.session.begin_nested():
                self.session.add(metrics)
        except IntegrityError:
            # Another writer created the period row first
            logger.debug(
                f"Usage period row already exists for tenant {metrics.tenant_id} "
                f"period {metrics.period_start.isoformat()}"
            )
        return await self.get_for_period(metrics.tenant_id, metrics.period_start)

    async def increment(
        self, tenant_id: UUID, period_start: datetime, deltas: Dict[str, int]
    ) -> None:
        values = {}
        for name, delta in deltas.items():
            column = COUNTER_COLUMNS.get(name)
            if column is None:
                raise ValueError(f"Unknown usage counter: {name}")
            values[name] = column + delta
        if not values:
            return

        stmt = (
            update(TenantUsageMetrics)
            .where(
                TenantUsageMetrics.tenant_id == tenant_id,
                TenantUsageMetrics.period_start == period_start,
            )
            .values(**values, last_updated=utc_now())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def record_api_requests(
        self, tenant_id: UUID, period_start: datetime, today: date, count: int
    ) -> None:
        today_count = case(
            (
                TenantUsageMetrics.last_api_request_date == today,
                TenantUsageMetrics.api_request_count_today + count,
            ),
            else_=count,
        )
        stmt = (
            update(TenantUsageMetrics)
            .where(
                TenantUsageMetrics.tenant_id == tenant_id,
                TenantUsageMetrics.period_start == period_start,
            )
            .values(
                api_request_count=TenantUsageMetrics.api_request_count + count,
                api_request_count_today=today_count,
                last_api_request_date=today,
                last_updated=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def increment_feature(
        self, tenant_id: UUID, period_start: datetime, feature_key: str, delta: int
    ) -> None:
        stmt = (
            update(TenantFeatureUsage)
            .where(
                TenantFeatureUsage.tenant_id == tenant_id,
                TenantFeatureUsage.period_start == period_start,
                TenantFeatureUsage.feature_key == feature_key,
            )
            .values(count=TenantFeatureUsage.count + delta)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 1:
            return

        row = TenantFeatureUsage(
            tenant_id=tenant_id,
            period_start=period_start,
            feature_key=feature_key,
            count=delta,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(row)
        except IntegrityError:
            # Lost the insert race; the row exists now, so add to it
            await self.session.execute(stmt)

    async def get_feature_usage(self, tenant_id: UUID, period_start: datetime) -> Dict[str, int]:
        stmt = select(TenantFeatureUsage).where(
            TenantFeatureUsage.tenant_id == tenant_id,
            TenantFeatureUsage.period_start == period_start,
        )
        result = await self.session.execute(stmt)
        return {row.feature_key: row.count for row in result.scalars().all()}

    async def delete_for_tenant(self, tenant_id: UUID) -> int:
        features = await self.session.execute(
            delete(TenantFeatureUsage).where(TenantFeatureUsage.tenant_id == tenant_id)
        )
        metrics = await self.session.execute(
            delete(TenantUsageMetrics).where(TenantUsageMetrics.tenant_id == tenant_id)
        )
        return (features.rowcount or 0) + (metrics.rowcount or 0)
