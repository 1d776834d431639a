"""
Usage Metrics Entities

Per-tenant, per-period usage counters.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import BigInteger, Column, Date, DateTime, Field, SQLModel, UniqueConstraint

from src.domain.clock import utc_now


class TenantUsageMetrics(SQLModel, table=True):
    """
    TenantUsageMetrics entity - one row per tenant per monthly period.

    Business Rules:
    - Created lazily on first usage in a period
    - Level counters (employees, users, departments, storage) carry forward
      from the previous period; flow counters (API requests) start at zero
    - Counters are only changed with atomic in-database increments
    """

    __tablename__ = "tenant_usage_metrics"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)

    period_start: datetime = Field(sa_column=Column(DateTime, nullable=False))
    period_end: datetime = Field(sa_column=Column(DateTime, nullable=False))

    employee_count: int = Field(default=0)
    user_count: int = Field(default=0)
    department_count: int = Field(default=0)

    api_request_count: int = Field(default=0, sa_column=Column(BigInteger, nullable=False))
    api_request_count_today: int = Field(default=0)
    last_api_request_date: Optional[date] = Field(default=None, sa_column=Column(Date))

    storage_bytes_used: int = Field(default=0, sa_column=Column(BigInteger, nullable=False))

    last_updated: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        UniqueConstraint("tenant_id", "period_start", name="uq_usage_tenant_period"),
    )


class TenantFeatureUsage(SQLModel, table=True):
    """Per-feature usage counter for one tenant and period"""

    __tablename__ = "tenant_feature_usage"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)
    period_start: datetime = Field(sa_column=Column(DateTime, nullable=False))
    feature_key: str = Field(max_length=100)
    count: int = Field(default=0)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "period_start", "feature_key", name="uq_feature_usage_tenant_period_key"
        ),
    )
