"""Tenant-scoped organization read use cases."""

from .list_departments_use_case import (
    DepartmentInfo,
    DepartmentListResponse,
    ListDepartmentsUseCase,
)

__all__ = ["DepartmentInfo", "DepartmentListResponse", "ListDepartmentsUseCase"]
