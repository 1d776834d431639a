"""
Tenant-scoped base model.

Every entity that belongs to exactly one tenant inherits tenant_id from
TenantScopedModel. Reads and writes of these entities go through the
isolation enforcer, never through a bare select.
"""

from uuid import UUID

from sqlmodel import Field, SQLModel


class TenantScopedModel(SQLModel):
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)
