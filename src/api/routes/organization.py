from fastapi import APIRouter, Depends

from src.api.error import raise_for_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.organization import DepartmentListResponse, ListDepartmentsUseCase
from src.depends import get_tenant_context, get_unit_of_work
from src.domain.context import TenantContext

router = APIRouter(prefix="/organization", tags=["Organization"])


@router.get("/departments", response_model=DepartmentListResponse)
async def list_departments(
    context: TenantContext = Depends(get_tenant_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Departments visible to the resolved tenant context"""
    result = await ListDepartmentsUseCase(uow).execute(context)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
