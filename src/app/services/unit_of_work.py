from abc import ABC, abstractmethod

from src.app.repositories.alert_repository import IAlertRepository
from src.app.repositories.lifecycle_event_repository import ILifecycleEventRepository
from src.app.repositories.subscription_repository import (
    ISubscriptionPlanRepository,
    ISubscriptionRepository,
)
from src.app.repositories.tenant_data_repository import ITenantDataRepository
from src.app.repositories.tenant_repository import ITenantRepository
from src.app.repositories.usage_metrics_repository import IUsageMetricsRepository
from src.app.repositories.webhook_event_repository import IWebhookEventRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    tenants: ITenantRepository
    lifecycle_events: ILifecycleEventRepository
    usage_metrics: IUsageMetricsRepository
    plans: ISubscriptionPlanRepository
    subscriptions: ISubscriptionRepository
    alerts: IAlertRepository
    webhook_events: IWebhookEventRepository
    tenant_data: ITenantDataRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
