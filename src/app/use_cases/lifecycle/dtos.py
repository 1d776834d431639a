"""
Lifecycle Use Case DTOs (Data Transfer Objects)

Command and Response classes shared by the tenant lifecycle use cases.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from src.app.services.tenant_state_machine import TransitionOutcome


# ============================================================================
# Command DTOs
# ============================================================================


class LifecycleCommand(BaseModel):
    """Intent to move a tenant through one lifecycle operation"""

    reason: Optional[str] = Field(default=None, max_length=1000)
    triggered_by: Optional[str] = Field(default=None, max_length=255)
    grace_period_days: Optional[int] = Field(default=None, ge=0, le=365)
    retention_days: Optional[int] = Field(default=None, ge=0, le=3650)
    schedule_deletion: bool = True


# ============================================================================
# Response DTOs
# ============================================================================


class TenantLifecycleResponse(BaseModel):
    """Tenant state after a lifecycle operation"""

    tenant_id: str
    status: str
    previous_status: str
    version: int
    changed: bool
    event_id: Optional[str] = None
    event_type: Optional[str] = None
    suspended_at: Optional[datetime] = None
    grace_period_ends_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    scheduled_deletion_at: Optional[datetime] = None
    purged: Optional[Dict[str, int]] = None

    @classmethod
    def from_outcome(cls, outcome: TransitionOutcome) -> "TenantLifecycleResponse":
        tenant = outcome.tenant
        return cls(
            tenant_id=str(tenant.id),
            status=tenant.status.value,
            previous_status=outcome.previous_status.value,
            version=tenant.version,
            changed=outcome.changed,
            event_id=str(outcome.event.id) if outcome.event else None,
            event_type=outcome.event.event_type.value if outcome.event else None,
            suspended_at=tenant.suspended_at,
            grace_period_ends_at=tenant.grace_period_ends_at,
            cancelled_at=tenant.cancelled_at,
            scheduled_deletion_at=tenant.scheduled_deletion_at,
            purged=outcome.purged,
        )


class TenantSuspensionInfo(BaseModel):
    """Read-only projection of a tenant's suspension state"""

    tenant_id: str
    status: str
    is_suspended: bool
    suspended_at: Optional[datetime] = None
    grace_period_ends_at: Optional[datetime] = None
    scheduled_deletion_at: Optional[datetime] = None
    reason: Optional[str] = None
    can_reactivate: bool


class LifecycleEventInfo(BaseModel):
    id: str
    event_type: str
    previous_status: Optional[str] = None
    new_status: str
    reason: Optional[str] = None
    triggered_by: Optional[str] = None
    metadata: Dict[str, Union[str, int, float, bool, None]] = Field(default_factory=dict)
    occurred_at: datetime


class LifecycleEventsResponse(BaseModel):
    tenant_id: str
    events: List[LifecycleEventInfo]
    total: int


class TenantSummary(BaseModel):
    id: str
    name: str
    domain: Optional[str] = None
    status: str
    admin_email: str
    is_subscription_active: bool
    created_at: datetime
    suspended_at: Optional[datetime] = None
    scheduled_deletion_at: Optional[datetime] = None


class TenantListResponse(BaseModel):
    items: List[TenantSummary]
    total: int
    page: int
    page_size: int


class SwitchPlanResponse(BaseModel):
    tenant_id: str
    previous_plan: Optional[str] = None
    new_plan: str
    change: str
    subscription_id: str
