"""
Use Cases

Organized by domain folder:
- provisioning/: Signup, plan seeding and the provisioning orchestrator
- lifecycle/: Tenant state transitions and admin reads
- usage/: Usage counters, summaries and plan limits
- webhooks/: Billing provider events
- organization/: Tenant-scoped organization reads
"""

from .provisioning import (
    ProvisionTenantUseCase,
    SeedPlansUseCase,
    SignupTenantUseCase,
)
from .lifecycle import (
    ActivateTenantUseCase,
    CancelTenantUseCase,
    HardDeleteTenantUseCase,
    ResumeTenantUseCase,
    SoftDeleteTenantUseCase,
    SuspendTenantUseCase,
    SwitchPlanUseCase,
)
from .usage import (
    GetUsageLimitsUseCase,
    GetUsageSummaryUseCase,
    RecordUsageUseCase,
)
from .webhooks import (
    ProcessBillingWebhookUseCase,
    ReplayWebhookEventUseCase,
)
from .organization import ListDepartmentsUseCase

__all__ = [
    # Provisioning
    "ProvisionTenantUseCase",
    "SeedPlansUseCase",
    "SignupTenantUseCase",
    # Lifecycle
    "ActivateTenantUseCase",
    "CancelTenantUseCase",
    "HardDeleteTenantUseCase",
    "ResumeTenantUseCase",
    "SoftDeleteTenantUseCase",
    "SuspendTenantUseCase",
    "SwitchPlanUseCase",
    # Usage
    "GetUsageLimitsUseCase",
    "GetUsageSummaryUseCase",
    "RecordUsageUseCase",
    # Webhooks
    "ProcessBillingWebhookUseCase",
    "ReplayWebhookEventUseCase",
    # Organization
    "ListDepartmentsUseCase",
]
