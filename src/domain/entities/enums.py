"""
Tenant Lifecycle Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class TenantStatus(str, Enum):
    """Tenant lifecycle status"""

    provisioning = "provisioning"
    active = "active"
    provisioning_failed = "provisioning_failed"
    suspended = "suspended"
    cancelled = "cancelled"
    pending_deletion = "pending_deletion"
    deleted = "deleted"


class TenantLifecycleEventType(str, Enum):
    """Kinds of lifecycle events recorded for a tenant"""

    created = "created"
    provisioning_started = "provisioning_started"
    provisioning_completed = "provisioning_completed"
    provisioning_failed = "provisioning_failed"
    activated = "activated"
    suspended = "suspended"
    resumed = "resumed"
    upgraded = "upgraded"
    downgraded = "downgraded"
    cancelled = "cancelled"
    marked_for_deletion = "marked_for_deletion"
    deleted = "deleted"
    payment_failed = "payment_failed"
    payment_recovered = "payment_recovered"
    grace_period_started = "grace_period_started"
    grace_period_expired = "grace_period_expired"


class SubscriptionStatus(str, Enum):
    """Subscription status"""

    active = "active"
    trialing = "trialing"
    cancelled = "cancelled"


class BillingProvider(str, Enum):
    """External billing provider"""

    stripe = "stripe"
    paddle = "paddle"
    manual = "manual"


class AlertType(str, Enum):
    """Alert category"""

    overage = "overage"
    suspension = "suspension"
    payment_failure = "payment_failure"
    error = "error"


class AlertSeverity(str, Enum):
    """Alert severity"""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class AlertStatus(str, Enum):
    """Alert status"""

    active = "active"
    resolved = "resolved"


class UsageResource(str, Enum):
    """Plan-limited resources tracked per tenant"""

    employees = "employees"
    users = "users"
    storage = "storage"
    api_requests = "api_requests"


class TenantSortField(str, Enum):
    """Closed set of columns the tenant list can be ordered by"""

    name = "name"
    created_at = "created_at"
    status = "status"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"
