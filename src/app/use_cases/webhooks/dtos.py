from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from src.domain.entities import BillingProvider


class BillingWebhookCommand(BaseModel):
    """Billing provider event relayed after signature verification upstream"""

    event_type: str = Field(..., min_length=1, max_length=100)
    provider: BillingProvider = BillingProvider.stripe
    payload: Dict[str, Any] = Field(default_factory=dict)
    signature: Optional[str] = Field(default=None, max_length=500)


class WebhookAckResponse(BaseModel):
    received: bool = True
    event_id: str
    processed: bool
    action: Optional[str] = None
    tenant_id: Optional[str] = None
    error: Optional[str] = None
