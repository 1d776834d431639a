"""
Subscription Entities

Plans and the tenant's attachment to a plan.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import BigInteger, Column, DateTime, Field, Index, SQLModel

from src.domain.clock import utc_now

from .enums import BillingProvider, SubscriptionStatus


class SubscriptionPlan(SQLModel, table=True):
    """
    SubscriptionPlan entity - a purchasable plan and its limits.

    A limit of None means unlimited.
    """

    __tablename__ = "subscription_plans"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(unique=True, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    monthly_price: float = Field(default=0.0)
    currency: str = Field(default="USD", max_length=3)

    max_employees: Optional[int] = None
    max_users: Optional[int] = None
    max_storage_bytes: Optional[int] = Field(default=None, sa_column=Column(BigInteger))
    api_limit_per_day: Optional[int] = None
    trial_days: Optional[int] = None

    is_active: bool = Field(default=True)
    display_order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))


class Subscription(SQLModel, table=True):
    """
    Subscription entity - a tenant's plan attachment.

    Business Rules:
    - At most one active (or trialing) subscription per tenant
    - Switching plans cancels the current subscription and creates a new one
    """

    __tablename__ = "subscriptions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)
    plan_id: UUID = Field(foreign_key="subscription_plans.id")

    status: SubscriptionStatus = Field(default=SubscriptionStatus.active)
    provider: BillingProvider = Field(default=BillingProvider.manual)
    external_subscription_id: Optional[str] = Field(default=None, max_length=255)
    external_customer_id: Optional[str] = Field(default=None, max_length=255)

    is_trial: bool = Field(default=False)
    trial_ends_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    cancelled_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_subscription_tenant_status", "tenant_id", "status"),)
