from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.alert_repository import IAlertRepository
from src.domain.entities import Alert, AlertStatus, AlertType


class AlertRepository(IAlertRepository):
    """Alert repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active(
        self, tenant_id: UUID, alert_type: AlertType, resource: Optional[str] = None
    ) -> Optional[Alert]:
        stmt = select(Alert).where(
            Alert.tenant_id == tenant_id,
            Alert.alert_type == alert_type,
            Alert.status == AlertStatus.active,
        )
        if resource is not None:
            stmt = stmt.where(Alert.resource == resource)
        stmt = stmt.order_by(Alert.created_at.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, alert: Alert) -> Alert:
        self.session.add(alert)
        await self.session.flush()
        await self.session.refresh(alert)
        return alert

    async def list_by_tenant(self, tenant_id: UUID) -> List[Alert]:
        stmt = select(Alert).where(Alert.tenant_id == tenant_id).order_by(Alert.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
