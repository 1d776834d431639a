"""
Tenant isolation enforcer.

Every statement against a tenant-scoped table is passed through
scope_statement, and every entity written is passed through stamp_tenant.
A context elevated across all tenants is the only way to skip the tenant
predicate.
"""

from typing import Optional, Type

from src.domain.context import TenantContext
from src.domain.entities import TenantScopedModel
from src.domain.errors import CrossTenantAccessError, MissingTenantContextError


def _require_context(context: Optional[TenantContext], operation: str) -> TenantContext:
    if context is None:
        raise MissingTenantContextError(operation)
    return context


def scope_statement(stmt, model: Type[TenantScopedModel], context: Optional[TenantContext]):
    """Add the tenant predicate for model to stmt unless context spans all tenants"""
    context = _require_context(context, f"query on {model.__tablename__}")
    if context.is_cross_tenant:
        return stmt
    return stmt.where(model.tenant_id == context.tenant_id)


def stamp_tenant(entity: TenantScopedModel, context: Optional[TenantContext]) -> TenantScopedModel:
    """Set tenant_id from context on new entities; reject entities of another tenant"""
    context = _require_context(context, f"write to {type(entity).__tablename__}")
    current = getattr(entity, "tenant_id", None)

    if context.is_cross_tenant:
        # Elevated writes must still name a tenant on the entity itself
        if current is None:
            raise MissingTenantContextError(f"write to {type(entity).__tablename__}")
        return entity

    if current is None:
        entity.tenant_id = context.tenant_id
    elif current != context.tenant_id:
        raise CrossTenantAccessError(context.tenant_id, current)
    return entity
