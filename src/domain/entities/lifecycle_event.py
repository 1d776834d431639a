"""
TenantLifecycleEvent Entity

Append-only history of tenant lifecycle changes.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.clock import utc_now

from .enums import TenantLifecycleEventType, TenantStatus


class TenantLifecycleEvent(SQLModel, table=True):
    """
    TenantLifecycleEvent entity - immutable record of one lifecycle change.

    Business Rules:
    - Never updated or deleted, including on hard delete of the tenant
    - Exactly one event per successful transition, written in the same
      transaction as the status change
    - Audit-only events (created, upgraded, downgraded) keep
      previous_status == new_status
    """

    __tablename__ = "tenant_lifecycle_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)

    event_type: TenantLifecycleEventType
    previous_status: Optional[TenantStatus] = None
    new_status: TenantStatus

    reason: Optional[str] = Field(default=None, max_length=1000)
    triggered_by: Optional[str] = Field(default=None, max_length=255)
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    occurred_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_lifecycle_event_tenant_occurred", "tenant_id", "occurred_at"),
        Index("idx_lifecycle_event_type", "event_type"),
    )
