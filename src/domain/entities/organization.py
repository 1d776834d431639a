"""
Organization Entities

Tenant-scoped records seeded by provisioning: role permissions, modules,
departments, positions and the tenant's user accounts.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, UniqueConstraint

from src.domain.clock import utc_now

from .tenant_scoped import TenantScopedModel


class RolePermission(TenantScopedModel, table=True):
    """Page-level permission of a role inside one tenant"""

    __tablename__ = "role_permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    role_name: str = Field(max_length=50)
    page_path: str = Field(max_length=200)
    can_view: bool = Field(default=False)
    can_create: bool = Field(default=False)
    can_edit: bool = Field(default=False)
    can_delete: bool = Field(default=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "role_name", "page_path", name="uq_role_permission"),
    )


class Module(TenantScopedModel, table=True):
    """Navigation module enabled for a tenant"""

    __tablename__ = "modules"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    path: str = Field(max_length=200)
    display_order: int = Field(default=0)
    is_active: bool = Field(default=True)

    __table_args__ = (UniqueConstraint("tenant_id", "path", name="uq_module_path"),)


class Department(TenantScopedModel, table=True):
    __tablename__ = "departments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_department_name"),)


class Position(TenantScopedModel, table=True):
    __tablename__ = "positions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    department_id: Optional[UUID] = Field(default=None, foreign_key="departments.id", index=True)
    title: str = Field(max_length=100)
    is_active: bool = Field(default=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "title", name="uq_position_title"),
    )


class TenantUser(TenantScopedModel, table=True):
    """
    TenantUser entity - an account inside a tenant.

    Business Rules:
    - Email unique within a tenant
    - The provisioning admin starts without a password and receives a
      setup token; only the bcrypt hash of the token is stored
    """

    __tablename__ = "tenant_users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    role_name: str = Field(max_length=50)
    is_active: bool = Field(default=True)

    setup_token_hash: Optional[str] = Field(default=None, max_length=60)
    setup_token_expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_tenant_user_email"),)
