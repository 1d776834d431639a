"""
Alert Entity

Operational alerts raised for a tenant (overage, suspension, billing).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.clock import utc_now

from .enums import AlertSeverity, AlertStatus, AlertType


class Alert(SQLModel, table=True):
    """
    Alert entity.

    Business Rules:
    - At most one active overage alert per (tenant, resource)
    - Resolved alerts are kept for history
    """

    __tablename__ = "alerts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)

    alert_type: AlertType
    resource: Optional[str] = Field(default=None, max_length=50)
    severity: AlertSeverity = Field(default=AlertSeverity.medium)
    status: AlertStatus = Field(default=AlertStatus.active)
    message: str = Field(max_length=1000)
    alert_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    resolved_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_alert_tenant_type_resource_status", "tenant_id", "alert_type", "resource", "status"),
    )
