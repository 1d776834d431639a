from fastapi import APIRouter, Depends, status

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.app.services.tenant_cache import ITenantCache
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_metrics_tracker import UsageSummary
from src.app.use_cases.usage import (
    GetUsageLimitsUseCase,
    GetUsageSummaryUseCase,
    RecordUsageCommand,
    RecordUsageResponse,
    RecordUsageUseCase,
    UsageLimitsResponse,
)
from src.depends import get_tenant_cache, get_tenant_context, get_unit_of_work
from src.domain.context import TenantContext

router = APIRouter(prefix="/usage", tags=["Usage"])


@router.get("/summary", response_model=UsageSummary)
async def get_usage_summary(
    context: TenantContext = Depends(get_tenant_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: ITenantCache = Depends(get_tenant_cache),
):
    """
    Current period usage of the caller's tenant, cached per tenant

    Raises:
        - 400 Bad Request: MISSING_TENANT_CONTEXT, INVALID_TENANT_ID
        - 403 Forbidden: FORBIDDEN_TENANT_MISMATCH
        - 404 Not Found: TENANT_NOT_FOUND
    """
    use_case = GetUsageSummaryUseCase(
        uow,
        cache,
        default_plan_name=ApplicationConfig.DEFAULT_PLAN_NAME,
        ttl_seconds=ApplicationConfig.USAGE_SUMMARY_CACHE_TTL_SECONDS,
    )
    result = await use_case.execute(context)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/limits", response_model=UsageLimitsResponse)
async def get_usage_limits(
    context: TenantContext = Depends(get_tenant_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetUsageLimitsUseCase(
        uow, default_plan_name=ApplicationConfig.DEFAULT_PLAN_NAME
    ).execute(context)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/increments", status_code=status.HTTP_200_OK, response_model=RecordUsageResponse
)
async def record_usage(
    command: RecordUsageCommand,
    context: TenantContext = Depends(get_tenant_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: ITenantCache = Depends(get_tenant_cache),
):
    """
    Record one usage increment for the caller's tenant

    Raises:
        - 404 Not Found: TENANT_NOT_FOUND
        - 409 Conflict: INVALID_STATE_TRANSITION (tenant not active)
    """
    use_case = RecordUsageUseCase(
        uow, cache, default_plan_name=ApplicationConfig.DEFAULT_PLAN_NAME
    )
    result = await use_case.execute(context, command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
