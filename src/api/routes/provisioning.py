from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.app.services.email_service import IEmailService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.provisioning import (
    ProvisioningResponse,
    ProvisionTenantCommand,
    ProvisionTenantUseCase,
    SignupTenantCommand,
    SignupTenantResponse,
    SignupTenantUseCase,
)
from src.depends import actor_of, get_email_service, get_unit_of_work, require_superadmin
from src.domain.context import TenantContext

router = APIRouter(tags=["Provisioning"])


@router.post(
    "/tenants/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=SignupTenantResponse,
)
async def signup_tenant(
    request: SignupTenantCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Tenant Signup

    Creates the tenant in provisioning. The provisioning worker (or the admin
    provision endpoint) runs the setup steps. Repeating a request with the
    same idempotency_token returns the original tenant with replayed=true.

    Raises:
        - 404 Not Found: PLAN_NOT_FOUND
        - 409 Conflict: TENANT_ALREADY_EXISTS
        - 422 Unprocessable Entity: request validation
    """
    use_case = SignupTenantUseCase(uow)
    result = await use_case.execute(request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ProvisionTenantRequest(BaseModel):
    plan_id: Optional[UUID] = None
    start_trial: Optional[bool] = None
    idempotency_token: Optional[str] = Field(default=None, min_length=8, max_length=128)


@router.post(
    "/admin/tenants/{tenant_id}/provision",
    status_code=status.HTTP_200_OK,
    response_model=ProvisioningResponse,
)
async def provision_tenant(
    tenant_id: UUID,
    request: Optional[ProvisionTenantRequest] = None,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_service: IEmailService = Depends(get_email_service),
):
    """
    Run (or resume) provisioning of a tenant

    Raises:
        - 403 Forbidden: INSUFFICIENT_ROLE
        - 404 Not Found: TENANT_NOT_FOUND
        - 409 Conflict: IDEMPOTENCY_TOKEN_MISMATCH
        - 422 Unprocessable Entity: PROVISIONING_STEP_FAILED
        - 504 Gateway Timeout: PROVISIONING_TIMEOUT (tenant stays resumable)
    """
    request = request or ProvisionTenantRequest()
    use_case = ProvisionTenantUseCase(
        uow,
        email_service,
        default_plan_name=ApplicationConfig.DEFAULT_PLAN_NAME,
        timeout_seconds=ApplicationConfig.PROVISIONING_TIMEOUT_SECONDS,
    )
    result = await use_case.execute(
        tenant_id,
        ProvisionTenantCommand(
            plan_id=request.plan_id,
            start_trial=request.start_trial,
            idempotency_token=request.idempotency_token,
            triggered_by=actor_of(context),
        ),
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value
