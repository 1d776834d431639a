"""
Admin lifecycle endpoints

Every route here requires a superadmin JWT and acts through an elevated
tenant context.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.app.services.email_service import IEmailService
from src.app.services.tenant_cache import ITenantCache
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.lifecycle import (
    CancelTenantUseCase,
    GetLifecycleEventsUseCase,
    GetSuspensionInfoUseCase,
    HardDeleteTenantUseCase,
    LifecycleCommand,
    LifecycleEventsResponse,
    ListTenantsUseCase,
    ResumeTenantUseCase,
    SoftDeleteTenantUseCase,
    SuspendTenantUseCase,
    SwitchPlanResponse,
    SwitchPlanUseCase,
    TenantLifecycleResponse,
    TenantListResponse,
    TenantSuspensionInfo,
)
from src.app.workers.periodic_worker import UnitOfWorkScope
from src.app.workers.reconciliation_loop import ReconciliationLoop, ReconciliationReport
from src.depends import (
    actor_of,
    get_email_service,
    get_tenant_cache,
    get_unit_of_work,
    get_uow_factory,
    require_superadmin,
)
from src.domain.context import TenantContext
from src.domain.entities import SortDirection, TenantSortField, TenantStatus

router = APIRouter(prefix="/admin", tags=["Lifecycle"])

TRANSITIONS = {
    "resume": ResumeTenantUseCase,
    "cancel": CancelTenantUseCase,
    "soft-delete": SoftDeleteTenantUseCase,
    "hard-delete": HardDeleteTenantUseCase,
}


def _with_actor(command: Optional[LifecycleCommand], context: TenantContext) -> LifecycleCommand:
    command = command or LifecycleCommand()
    if not command.triggered_by:
        command = command.model_copy(update={"triggered_by": actor_of(context)})
    return command


@router.post(
    "/tenants/{tenant_id}/suspend",
    status_code=status.HTTP_200_OK,
    response_model=TenantLifecycleResponse,
)
async def suspend_tenant(
    tenant_id: UUID,
    command: Optional[LifecycleCommand] = None,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_service: IEmailService = Depends(get_email_service),
):
    """
    Suspend Tenant

    active -> suspended; the grace period starts now. The tenant admin is
    notified after the suspension is committed.

    Raises:
        - 403 Forbidden: INSUFFICIENT_ROLE
        - 404 Not Found: TENANT_NOT_FOUND
        - 409 Conflict: INVALID_STATE_TRANSITION, CONCURRENCY_CONFLICT
    """
    use_case = SuspendTenantUseCase(
        uow,
        email_service,
        grace_period_days=ApplicationConfig.DEFAULT_GRACE_PERIOD_DAYS,
        retention_days=ApplicationConfig.DEFAULT_RETENTION_DAYS,
    )
    result = await use_case.execute(tenant_id, _with_actor(command, context))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


async def _transition(
    action: str,
    tenant_id: UUID,
    command: Optional[LifecycleCommand],
    context: TenantContext,
    uow: UnitOfWork,
    cache: Optional[ITenantCache] = None,
):
    use_case = TRANSITIONS[action](
        uow,
        grace_period_days=ApplicationConfig.DEFAULT_GRACE_PERIOD_DAYS,
        retention_days=ApplicationConfig.DEFAULT_RETENTION_DAYS,
        cache=cache,
    )
    result = await use_case.execute(tenant_id, _with_actor(command, context))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/tenants/{tenant_id}/resume", response_model=TenantLifecycleResponse)
async def resume_tenant(
    tenant_id: UUID,
    command: Optional[LifecycleCommand] = None,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """suspended -> active"""
    return await _transition("resume", tenant_id, command, context, uow)


@router.post("/tenants/{tenant_id}/cancel", response_model=TenantLifecycleResponse)
async def cancel_tenant(
    tenant_id: UUID,
    command: Optional[LifecycleCommand] = None,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """active|suspended -> cancelled; schedules deletion unless schedule_deletion is false"""
    return await _transition("cancel", tenant_id, command, context, uow)


@router.post("/tenants/{tenant_id}/soft-delete", response_model=TenantLifecycleResponse)
async def soft_delete_tenant(
    tenant_id: UUID,
    command: Optional[LifecycleCommand] = None,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """cancelled -> pending_deletion"""
    return await _transition("soft-delete", tenant_id, command, context, uow)


@router.post("/tenants/{tenant_id}/hard-delete", response_model=TenantLifecycleResponse)
async def hard_delete_tenant(
    tenant_id: UUID,
    command: Optional[LifecycleCommand] = None,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: ITenantCache = Depends(get_tenant_cache),
):
    """
    pending_deletion -> deleted

    Purges tenant-scoped data and usage; the tenant row and its events stay
    as a tombstone, and the cached usage summary is dropped. Repeating it
    on a deleted tenant is a no-op.
    """
    return await _transition("hard-delete", tenant_id, command, context, uow, cache)


class SwitchPlanRequest(BaseModel):
    plan_id: UUID


@router.put("/tenants/{tenant_id}/plan", response_model=SwitchPlanResponse)
async def switch_plan(
    tenant_id: UUID,
    request: SwitchPlanRequest,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: ITenantCache = Depends(get_tenant_cache),
):
    """
    Switch Subscription Plan

    Raises:
        - 404 Not Found: TENANT_NOT_FOUND, PLAN_NOT_FOUND
        - 409 Conflict: PLAN_UNCHANGED, CONCURRENCY_CONFLICT
    """
    result = await SwitchPlanUseCase(uow, cache).execute(
        tenant_id, request.plan_id, triggered_by=actor_of(context)
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/tenants", response_model=TenantListResponse)
async def list_tenants(
    status_filter: Optional[TenantStatus] = Query(default=None, alias="status"),
    sort_by: TenantSortField = TenantSortField.created_at,
    direction: SortDirection = SortDirection.desc,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Paged tenant list; sort_by outside the closed set is rejected with 422"""
    result = await ListTenantsUseCase(uow).execute(
        status=status_filter, sort_by=sort_by, direction=direction, page=page, page_size=page_size
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/tenants/{tenant_id}/events", response_model=LifecycleEventsResponse)
async def get_lifecycle_events(
    tenant_id: UUID,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetLifecycleEventsUseCase(uow).execute(tenant_id, limit=limit, offset=offset)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/tenants/{tenant_id}/suspension", response_model=TenantSuspensionInfo)
async def get_suspension_info(
    tenant_id: UUID,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetSuspensionInfoUseCase(uow).execute(tenant_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/reconciliation/run", response_model=ReconciliationReport)
async def run_reconciliation(
    context: TenantContext = Depends(require_superadmin),
    uow_factory: UnitOfWorkScope = Depends(get_uow_factory),
    cache: ITenantCache = Depends(get_tenant_cache),
):
    """One reconciliation tick on demand, outside the background schedule"""
    loop = ReconciliationLoop(
        uow_factory,
        grace_period_days=ApplicationConfig.DEFAULT_GRACE_PERIOD_DAYS,
        retention_days=ApplicationConfig.DEFAULT_RETENTION_DAYS,
        default_plan_name=ApplicationConfig.DEFAULT_PLAN_NAME,
        tenant_timeout_seconds=ApplicationConfig.TENANT_OPERATION_TIMEOUT_SECONDS,
        cache=cache,
    )
    return await loop.run_once()
