"""
Use Case: List Departments

Departments visible to the caller's tenant context.
"""

from typing import List, Optional

from pydantic import BaseModel

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.context import TenantContext
from src.domain.entities import Department


class DepartmentInfo(BaseModel):
    id: str
    tenant_id: str
    name: str
    description: Optional[str] = None
    is_active: bool


class DepartmentListResponse(BaseModel):
    items: List[DepartmentInfo]
    total: int


class ListDepartmentsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, context: TenantContext) -> Result[DepartmentListResponse]:
        async with self.uow:
            departments = await self.uow.tenant_data.list(
                context, Department, order_by=Department.name
            )
            return Return.ok(
                DepartmentListResponse(
                    items=[
                        DepartmentInfo(
                            id=str(d.id),
                            tenant_id=str(d.tenant_id),
                            name=d.name,
                            description=d.description,
                            is_active=d.is_active,
                        )
                        for d in departments
                    ],
                    total=len(departments),
                )
            )
