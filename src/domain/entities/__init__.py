"""
Tenant Lifecycle Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AlertSeverity,
    AlertStatus,
    AlertType,
    BillingProvider,
    SortDirection,
    SubscriptionStatus,
    TenantLifecycleEventType,
    TenantSortField,
    TenantStatus,
    UsageResource,
)

# Export all entities
from .tenant import Tenant
from .lifecycle_event import TenantLifecycleEvent
from .usage_metrics import TenantFeatureUsage, TenantUsageMetrics
from .subscription import Subscription, SubscriptionPlan
from .alert import Alert
from .webhook_event import WebhookEvent
from .tenant_scoped import TenantScopedModel
from .organization import Department, Module, Position, RolePermission, TenantUser

__all__ = [
    # Enums
    "AlertSeverity",
    "AlertStatus",
    "AlertType",
    "BillingProvider",
    "SortDirection",
    "SubscriptionStatus",
    "TenantLifecycleEventType",
    "TenantSortField",
    "TenantStatus",
    "UsageResource",
    # Entities
    "Tenant",
    "TenantLifecycleEvent",
    "TenantUsageMetrics",
    "TenantFeatureUsage",
    "Subscription",
    "SubscriptionPlan",
    "Alert",
    "WebhookEvent",
    "TenantScopedModel",
    "RolePermission",
    "Module",
    "Department",
    "Position",
    "TenantUser",
]

# Tenant-scoped tables, in purge order (children first)
TENANT_SCOPED_MODELS = (Position, Department, RolePermission, Module, TenantUser)
