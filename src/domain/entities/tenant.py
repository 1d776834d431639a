"""
Tenant Entity

Represents an isolated customer workspace and its lifecycle state.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.clock import utc_now

from .enums import TenantStatus


class Tenant(SQLModel, table=True):
    """
    Tenant entity - isolated workspace for one customer organization.

    Business Rules:
    - status only changes through the lifecycle state machine
    - every status change bumps version (optimistic concurrency)
    - milestone timestamps are written only by the transition that owns them
    - after hard delete the row remains as a tombstone with status=deleted
    """

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    normalized_name: str = Field(max_length=255, unique=True)
    domain: Optional[str] = Field(default=None, max_length=255, unique=True)

    status: TenantStatus = Field(default=TenantStatus.provisioning)
    version: int = Field(default=1)

    # Admin contact captured at signup
    admin_email: str = Field(max_length=255)
    admin_first_name: str = Field(default="", max_length=100)
    admin_last_name: str = Field(default="", max_length=100)

    # Idempotent signup and provisioning
    idempotency_token: Optional[str] = Field(default=None, unique=True, max_length=128)
    provisioning_steps: list = Field(default_factory=list, sa_column=Column(JSON))
    provisioning_result: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    failure_reason: Optional[str] = Field(default=None, max_length=1000)
    requested_plan_id: Optional[UUID] = Field(default=None)
    start_trial: bool = Field(default=False)

    # External billing references
    stripe_customer_id: Optional[str] = Field(default=None, index=True, max_length=255)
    paddle_customer_id: Optional[str] = Field(default=None, index=True, max_length=255)
    is_subscription_active: bool = Field(default=False)

    # Lifecycle milestones
    provisioned_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    activated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    suspended_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    grace_period_ends_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    cancelled_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    scheduled_deletion_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_tenant_status", "status"),
        Index("idx_tenant_grace_period_ends_at", "grace_period_ends_at"),
        Index("idx_tenant_scheduled_deletion_at", "scheduled_deletion_at"),
    )
