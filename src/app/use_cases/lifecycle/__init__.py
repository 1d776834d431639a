"""Tenant lifecycle use cases: transitions, history and plan changes."""

from .dtos import (
    LifecycleCommand,
    LifecycleEventInfo,
    LifecycleEventsResponse,
    SwitchPlanResponse,
    TenantLifecycleResponse,
    TenantListResponse,
    TenantSummary,
    TenantSuspensionInfo,
)
from .get_lifecycle_events_use_case import GetLifecycleEventsUseCase
from .get_suspension_info_use_case import GetSuspensionInfoUseCase
from .list_tenants_use_case import ListTenantsUseCase
from .simple_transitions import (
    ActivateTenantUseCase,
    CancelTenantUseCase,
    HardDeleteTenantUseCase,
    ResumeTenantUseCase,
    SoftDeleteTenantUseCase,
)
from .suspend_tenant_use_case import SuspendTenantUseCase
from .switch_plan_use_case import SwitchPlanUseCase
from .transition_use_case import TenantTransitionUseCase

__all__ = [
    "LifecycleCommand",
    "LifecycleEventInfo",
    "LifecycleEventsResponse",
    "SwitchPlanResponse",
    "TenantLifecycleResponse",
    "TenantListResponse",
    "TenantSummary",
    "TenantSuspensionInfo",
    "TenantTransitionUseCase",
    "SuspendTenantUseCase",
    "ResumeTenantUseCase",
    "ActivateTenantUseCase",
    "CancelTenantUseCase",
    "SoftDeleteTenantUseCase",
    "HardDeleteTenantUseCase",
    "GetSuspensionInfoUseCase",
    "GetLifecycleEventsUseCase",
    "ListTenantsUseCase",
    "SwitchPlanUseCase",
]
