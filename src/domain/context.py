"""
TenantContext value object.

Resolved once per request (or per background unit of work) and passed
explicitly into every tenant-scoped data access. Immutable.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from src.domain.errors import MissingTenantContextError


@dataclass(frozen=True)
class TenantContext:
    """
    Ambient tenant identity.

    - tenant_id set, elevated False: normal user, scoped to one tenant
    - tenant_id set, elevated True: superadmin acting on one tenant
    - tenant_id None, elevated True: superadmin across all tenants
    """

    tenant_id: Optional[UUID]
    elevated: bool = False
    user_id: Optional[str] = None
    source: str = "request"

    def __post_init__(self):
        if self.tenant_id is None and not self.elevated:
            raise MissingTenantContextError("non-elevated context")

    @classmethod
    def for_tenant(cls, tenant_id: UUID, user_id: Optional[str] = None, source: str = "request"):
        return cls(tenant_id=tenant_id, elevated=False, user_id=user_id, source=source)

    @classmethod
    def elevated_all(cls, user_id: Optional[str] = None, source: str = "request"):
        return cls(tenant_id=None, elevated=True, user_id=user_id, source=source)

    @classmethod
    def elevated_for(cls, tenant_id: UUID, user_id: Optional[str] = None, source: str = "request"):
        return cls(tenant_id=tenant_id, elevated=True, user_id=user_id, source=source)

    @property
    def is_cross_tenant(self) -> bool:
        return self.elevated and self.tenant_id is None

    def require_tenant_id(self, operation: str) -> UUID:
        if self.tenant_id is None:
            raise MissingTenantContextError(operation)
        return self.tenant_id
