from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Alert, AlertType


class IAlertRepository(ABC):
    """Alert repository interface"""

    @abstractmethod
    async def get_active(
        self, tenant_id: UUID, alert_type: AlertType, resource: Optional[str] = None
    ) -> Optional[Alert]:
        pass

    @abstractmethod
    async def create(self, alert: Alert) -> Alert:
        pass

    @abstractmethod
    async def list_by_tenant(self, tenant_id: UUID) -> List[Alert]:
        pass
