"""
Domain exceptions raised by the data-access layer.

Use cases translate the ones they can recover from into Error codes; the
API renders any that escape as 400/403 responses.
"""

from uuid import UUID


class TenantIsolationError(Exception):
    """Base class for tenant isolation violations"""


class MissingTenantContextError(TenantIsolationError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Tenant context required for {operation}")


class CrossTenantAccessError(TenantIsolationError):
    def __init__(self, context_tenant_id, entity_tenant_id):
        self.context_tenant_id = context_tenant_id
        self.entity_tenant_id = entity_tenant_id
        super().__init__(
            f"Entity belongs to tenant {entity_tenant_id}, context is {context_tenant_id}"
        )


class ElevationRequiredError(TenantIsolationError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Elevated context required for {operation}")


class ConcurrencyConflictError(Exception):
    """Raised when a version-checked update matches no row"""

    def __init__(self, tenant_id: UUID, expected_version: int):
        self.tenant_id = tenant_id
        self.expected_version = expected_version
        super().__init__(
            f"Tenant {tenant_id} was modified concurrently (expected version {expected_version})"
        )
