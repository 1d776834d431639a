from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.alert_repository import AlertRepository
from src.adapter.repositories.lifecycle_event_repository import LifecycleEventRepository
from src.adapter.repositories.subscription_repository import (
    SubscriptionPlanRepository,
    SubscriptionRepository,
)
from src.adapter.repositories.tenant_data_repository import TenantDataRepository
from src.adapter.repositories.tenant_repository import TenantRepository
from src.adapter.repositories.usage_metrics_repository import UsageMetricsRepository
from src.adapter.repositories.webhook_event_repository import WebhookEventRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.tenants = TenantRepository(self.session)
        self.lifecycle_events = LifecycleEventRepository(self.session)
        self.usage_metrics = UsageMetricsRepository(self.session)
        self.plans = SubscriptionPlanRepository(self.session)
        self.subscriptions = SubscriptionRepository(self.session)
        self.alerts = AlertRepository(self.session)
        self.webhook_events = WebhookEventRepository(self.session)
        self.tenant_data = TenantDataRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed inside the block is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
