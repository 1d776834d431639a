from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import WebhookEvent


class IWebhookEventRepository(ABC):
    """Webhook event repository interface"""

    @abstractmethod
    async def create(self, event: WebhookEvent) -> WebhookEvent:
        pass

    @abstractmethod
    async def get_by_id(self, event_id: UUID) -> Optional[WebhookEvent]:
        pass

    @abstractmethod
    async def update(self, event: WebhookEvent) -> WebhookEvent:
        pass
