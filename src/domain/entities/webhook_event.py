"""
WebhookEvent Entity

Billing provider events, recorded before processing so failures can be replayed.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.clock import utc_now

from .enums import BillingProvider


class WebhookEvent(SQLModel, table=True):
    """
    WebhookEvent entity.

    Business Rules:
    - Every received webhook is stored, processed or not
    - A failed event keeps processed=False and the failure in error
    """

    __tablename__ = "webhook_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_type: str = Field(max_length=100)
    provider: BillingProvider = Field(default=BillingProvider.stripe)
    payload: dict = Field(default_factory=dict, sa_column=Column(JSON))
    signature: Optional[str] = Field(default=None, max_length=500)

    tenant_id: Optional[UUID] = Field(default=None, index=True)
    processed: bool = Field(default=False)
    error: Optional[str] = Field(default=None, max_length=2000)
    attempts: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    processed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_webhook_processed", "processed"),)
